"""Data models used throughout the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LinkCandidate:
    """Raw anchor discovered in the rendered email DOM."""

    index: int
    href: Optional[str]
    title: Optional[str]


@dataclass
class ImageCandidate:
    """Raw image reference discovered in the rendered email DOM."""

    src: str
    alt: Optional[str]
    width: Optional[int]
    height: Optional[int]


@dataclass
class AnalyzedLink:
    """Outcome of checking a single hyperlink."""

    text: Optional[str]
    url: str
    status: Optional[int] = None
    redirect_chain: Optional[List[str]] = None
    final_url: Optional[str] = None
    utm_params: Optional[Dict[str, str]] = None
    screenshot_path: Optional[str] = None

    @classmethod
    def skipped(cls, url: str, text: Optional[str]) -> "AnalyzedLink":
        """Record for a link that is reported but never navigated."""
        return cls(text=text, url=url)

    @classmethod
    def unreachable(cls, url: str, text: Optional[str]) -> "AnalyzedLink":
        """Fallback record for a link whose check failed."""
        return cls(
            text=text,
            url=url,
            status=0,
            redirect_chain=[],
            final_url=url,
            utm_params={},
            screenshot_path="",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "url": self.url,
            "status": self.status,
            "redirectChain": self.redirect_chain,
            "finalUrl": self.final_url,
            "utmParams": self.utm_params,
            "screenshotPath": self.screenshot_path,
        }


@dataclass
class AnalyzedImage:
    """Outcome of validating a single content image."""

    src: str
    alt: Optional[str]
    status: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_candidate(
        cls, candidate: ImageCandidate, status: Optional[int]
    ) -> "AnalyzedImage":
        return cls(
            src=candidate.src,
            alt=candidate.alt,
            status=status,
            width=candidate.width,
            height=candidate.height,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "src": self.src,
            "alt": self.alt,
            "status": self.status,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class AnalysisResult:
    """Everything one analysis run produces."""

    links: List[AnalyzedLink]
    images: List[AnalyzedImage]
    screenshot_desktop_path: str
    screenshot_mobile_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "links": [link.to_dict() for link in self.links],
            "images": [image.to_dict() for image in self.images],
            "screenshotDesktopPath": self.screenshot_desktop_path,
            "screenshotMobilePath": self.screenshot_mobile_path,
        }


@dataclass
class ProgressEvent:
    """Notification emitted at stage and per-item boundaries."""

    stage: str
    message: str
    current: Optional[int] = None
    total: Optional[int] = None


@dataclass
class CampaignSummary:
    """Distinct ``utm_campaign`` values observed across analyzed links."""

    available_campaigns: List[str] = field(default_factory=list)

    @property
    def has_multiple_campaigns(self) -> bool:
        return len(self.available_campaigns) > 1

    @property
    def has_no_campaigns(self) -> bool:
        return not self.available_campaigns

    @property
    def campaign_id(self) -> Optional[str]:
        if len(self.available_campaigns) == 1:
            return self.available_campaigns[0]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "availableCampaigns": list(self.available_campaigns),
            "hasMultipleCampaigns": self.has_multiple_campaigns,
            "hasNoCampaigns": self.has_no_campaigns,
        }
