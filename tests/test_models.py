"""Tests for application and vote records."""

from pb_portal.models.application import Application, load_applications
from pb_portal.models.vote import PublicVote


class TestApplication:
    def test_from_document(self):
        app = Application.from_document(
            {
                "id": "app_PBBLN001",
                "ref": "PBBLN001",
                "area": "Blaenavon",
                "projectTitle": "Community Garden",
                "orgName": "Friends of the Park",
                "amountRequested": 4000,
                "totalCost": 5000,
                "status": "Funded",
                "priority": "Health & Wellbeing",
                "formData": {"smartObjectives": "..."},
            }
        )
        assert app.project_title == "Community Garden"
        assert app.amount_requested == 4000
        assert app.is_funded is True
        assert app.is_stage2 is False

    def test_missing_amounts_are_zero(self):
        app = Application.from_document({"id": "a", "amountRequested": None})
        assert app.amount_requested == 0
        assert app.total_cost == 0

    def test_defaults(self):
        app = Application(id="a")
        assert app.status == "Draft"
        assert app.priority_category == "Other"

    def test_stage2_statuses(self):
        assert Application(id="a", status="Invited-Stage2").is_stage2 is True
        assert Application(id="a", status="Submitted-Stage2").is_stage2 is True
        assert Application(id="a", status="Submitted-Stage1").is_stage2 is False

    def test_cross_area(self):
        assert Application(id="a", area="Cross-Area").is_cross_area is True

    def test_request_above_cost_warns(self, caplog):
        Application(id="a", ref="PB1", amount_requested=6000, total_cost=5000)
        assert "exceeds totalCost" in caplog.text

    def test_load_skips_missing_ids(self):
        apps = load_applications([{"id": "a"}, {"ref": "no-id"}, {"id": ""}])
        assert [app.id for app in apps] == ["a"]


class TestPublicVote:
    def test_from_document(self):
        vote = PublicVote.from_document(
            {"id": "app_1_v1", "applicationId": "app_1", "voterId": "v1", "area": "Blaenavon", "inPerson": True}
        )
        assert vote.application_id == "app_1"
        assert vote.in_person is True

    def test_digital_by_default(self):
        assert PublicVote(application_id="app_1").in_person is False
