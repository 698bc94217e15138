"""User invitations: tokens, email rendering and the invitation lifecycle."""

from hr_automation.invitations.models import INVITABLE_ROLES, Invitation
from hr_automation.invitations.service import InvitationService
from hr_automation.invitations.tokens import generate_invite_token, invite_url

__all__ = [
    "INVITABLE_ROLES",
    "Invitation",
    "InvitationService",
    "generate_invite_token",
    "invite_url",
]
