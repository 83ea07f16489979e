"""E-mail dispatch of generated letters with per-school response links."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from app.services.email_client import EmailClient
from app.services.letter_pipeline import CampaignNotFound, school_name_of
from app.services.error_mapping import public_error_message
from app.services.prompt_security import escape_text, sanitize_html

logger = logging.getLogger(__name__)

FALLBACK_RECIPIENT = "school@example.com"


class NoLettersToSend(Exception):
    pass


@dataclass
class SendResult:
    results: list[dict] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if r["success"])

    @property
    def failed(self) -> int:
        return self.total - self.success

    @property
    def message(self) -> str:
        return f"Sent {self.success} letters successfully, {self.failed} failed"


def render_invitation_email(letter: str, response_url: str, organization_name: str) -> str:
    body = sanitize_html(escape_text(letter).replace("\n", "<br>"))
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">STEM Outreach Program Invitation</h2>
  <div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
    {body}
  </div>
  <div style="margin: 30px 0; padding: 20px; background: #e8f5e9; border-radius: 8px;">
    <h3 style="color: #2e7d32; margin-top: 0;">Please Confirm Your Attendance</h3>
    <p>Click the button below to confirm whether your school can attend this event:</p>
    <div style="text-align: center; margin: 20px 0;">
      <a href="{response_url}"
         style="background: #2e7d32; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; display: inline-block;">
        Respond to Invitation
      </a>
    </div>
    <p style="font-size: 12px; color: #666;">Or copy this link: {response_url}</p>
  </div>
  <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; font-size: 12px; color: #666;">
    <p>This invitation was sent by {escape_text(organization_name)}</p>
    <p>If you have any questions, please reply to this email.</p>
  </div>
</div>
"""


async def send_campaign_letters(
    repo,
    mailer: EmailClient,
    campaign_id: UUID,
    *,
    site_url: str,
    from_email: str | None = None,
) -> SendResult:
    campaign = await repo.get_campaign(campaign_id)
    if not campaign:
        raise CampaignNotFound(f"Campaign {campaign_id} not found")

    records = await repo.list_accepted_recommendations(campaign_id, with_letter_only=True)
    if not records:
        raise NoLettersToSend("No letters to send")

    organization = await repo.get_organization(campaign["organization_id"])
    organization_name = (organization or {}).get("name") or "STEM Outreach Organization"
    program = (campaign.get("visit_details") or {}).get("programDescription") or "Special Program"
    subject = f"STEM Outreach Invitation - {' '.join(str(program).split())}"

    logger.info(f"Sending {len(records)} letters for campaign {campaign_id}")
    result = SendResult()

    for record in records:
        school_name = school_name_of(record)
        recipient = (record.get("generated_data") or {}).get("contact_email") or FALLBACK_RECIPIENT
        token = str(uuid.uuid4())
        response_url = f"{site_url.rstrip('/')}/school-response/{token}"

        try:
            await mailer.send(
                to=recipient,
                subject=subject,
                html=render_invitation_email(record["generated_letter"], response_url, organization_name),
                from_email=from_email,
            )
            await repo.update_recommendation(
                record["id"],
                response_token=token,
                letter_sent_at=datetime.now(timezone.utc),
                response_status="pending",
            )
        except Exception as e:
            logger.warning(f"Failed to send letter for {record['id']}: {e}")
            result.results.append({"school": school_name, "success": False, "error": public_error_message(e)})
            continue

        result.results.append({"school": school_name, "success": True, "email": recipient})

    await repo.update_campaign(campaign_id, status="letters_sent")
    logger.info(f"Campaign {campaign_id}: {result.message}")
    return result
