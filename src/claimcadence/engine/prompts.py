"""Prompt templates for AI-generated follow-up emails."""
from __future__ import annotations

from typing import Optional

from ..models import ClaimSnapshot


GENERAL_FOLLOW_UP_SYSTEM_PROMPT = """
You are a professional public adjuster assistant. Generate a brief, professional follow-up email.

CLAIM CONTEXT:
- Claim Number: {claim_number}
- Policyholder: {policyholder}
- Loss Type: {loss_type}
- Status: {status}

This is follow-up #{sequence} of {max_count}.

GUIDELINES:
1. Be polite but professional
2. Reference the claim number
3. Ask if they need any additional information
4. Keep it concise (under 150 words)
5. Do not be pushy, this is a gentle reminder
6. Use plain text only, no markdown
7. Sign off as "{signature}"
""".strip()


RD_FOLLOW_UP_SYSTEM_PROMPT = """
You are a professional public adjuster assistant. Generate a polite but firm follow-up email about the release of Recoverable Depreciation (RD).

CLAIM CONTEXT:
- Claim Number: {claim_number}
- Policyholder: {policyholder}
- Insurance Company: {carrier}
- Loss Type: {loss_type}
- Current Status: {status}

This is RD follow-up #{sequence}.

PURPOSE:
The policyholder has completed the work and submitted invoices. We need confirmation that:
1. The invoices and documentation were received
2. The recoverable depreciation is being processed for release
3. When the RD payment will be issued

GUIDELINES:
1. Be courteous but persistent
2. Reference the claim number prominently
3. Keep it concise (under 150 words)
4. If this is follow-up #2 or later, mention that the information was requested before
5. Use plain text only, no markdown
6. Do not use aggressive language
7. Sign off as "{signature}"
""".strip()


def _or_na(value: Optional[str]) -> str:
    return value or "N/A"


def general_follow_up_prompts(
    claim: ClaimSnapshot,
    sequence: int,
    max_count: int,
    signature: str,
    last_subject: Optional[str] = None,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for a general follow-up."""
    system = GENERAL_FOLLOW_UP_SYSTEM_PROMPT.format(
        claim_number=_or_na(claim.claim_number),
        policyholder=_or_na(claim.policyholder_name),
        loss_type=_or_na(claim.loss_type),
        status=_or_na(claim.status),
        sequence=sequence,
        max_count=max_count,
        signature=signature,
    )
    if last_subject:
        user = f'Generate a follow-up email. The last email sent was about: "{last_subject}"'
    else:
        user = "Generate a follow-up email checking on the status of this claim."
    return system, user


def rd_follow_up_prompts(
    claim: ClaimSnapshot,
    sequence: int,
    signature: str,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for a recoverable depreciation follow-up."""
    system = RD_FOLLOW_UP_SYSTEM_PROMPT.format(
        claim_number=_or_na(claim.claim_number),
        policyholder=_or_na(claim.policyholder_name),
        carrier=claim.insurance_company or "the carrier",
        loss_type=_or_na(claim.loss_type),
        status=claim.status or "Recoverable Depreciation Requested",
        sequence=sequence,
        signature=signature,
    )
    if sequence == 1:
        user = (
            "Generate the first RD follow-up email requesting confirmation that invoices "
            "were received and asking when recoverable depreciation will be released."
        )
    else:
        user = (
            f"Generate follow-up #{sequence} for RD release. Previous follow-ups have not "
            "received a response. Politely but firmly request an update on the recoverable "
            "depreciation release status."
        )
    return system, user
