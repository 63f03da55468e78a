"""Record models shared by the calculation modules."""

from pb_portal.models.application import Application, load_applications
from pb_portal.models.user import PortalUser
from pb_portal.models.vote import PublicVote

__all__ = [
    "Application",
    "PortalUser",
    "PublicVote",
    "load_applications",
]
