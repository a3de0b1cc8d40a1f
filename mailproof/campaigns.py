"""Campaign identification from the UTM parameters of analyzed links."""

from __future__ import annotations

import logging
from typing import Iterable, List

from .models import AnalyzedLink, CampaignSummary

logger = logging.getLogger("mailproof")


def summarize_campaigns(links: Iterable[AnalyzedLink]) -> CampaignSummary:
    """Collect distinct ``utm_campaign`` values in first-seen order."""
    campaigns: List[str] = []
    for link in links:
        campaign = (link.utm_params or {}).get("utm_campaign")
        if not campaign or not campaign.strip():
            continue
        if campaign not in campaigns:
            campaigns.append(campaign)

    summary = CampaignSummary(available_campaigns=campaigns)
    if summary.has_multiple_campaigns:
        logger.warning("Multiple UTM campaigns found: %s", ", ".join(campaigns))
    return summary
