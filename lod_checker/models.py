# models.py
"""
Data structures for the LOD compliance check.
Contains the report types shared by the clients, the controller and the renderer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple


class LODLevel(str, Enum):
    LOD300 = "LOD 300"
    LOD400 = "LOD 400"
    LOD500 = "LOD 500"

    @property
    def hint(self) -> str:
        return LOD_HINTS[self]

    @classmethod
    def from_label(cls, label: str) -> "LODLevel":
        """Accept 'LOD 400', 'LOD400' or '400'."""
        cleaned = (label or "").strip().upper().replace(" ", "")
        if not cleaned.startswith("LOD"):
            cleaned = "LOD" + cleaned
        for level in cls:
            if level.value.replace(" ", "") == cleaned:
                return level
        raise ValueError(f"Unknown LOD level: {label!r}")


LOD_HINTS = {
    LODLevel.LOD300: "Geometry defined. Specific system. No bolts/welds.",
    LODLevel.LOD400: "Fabrication ready. Bolts, welds, chamfers included.",
    LODLevel.LOD500: "As-Built verified. Contains manufacturer info.",
}


class ComplianceStatus(str, Enum):
    COMPLIANT = "Compliant"
    PARTIAL = "Partial"
    NON_COMPLIANT = "Non-Compliant"


FACETS = ("geometry", "parameters", "information")


@dataclass(frozen=True)
class AnalysisSection:
    """One evaluated facet of the element (geometry, parameters or information)."""
    score: int
    status: ComplianceStatus
    observations: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisSection":
        return cls(
            score=int(round(data["score"])),
            status=ComplianceStatus(data["status"]),
            observations=tuple(data["observations"]),
            missing=tuple(data["missing"]),
            recommendations=tuple(data["recommendations"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "observations": list(self.observations),
            "missing": list(self.missing),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """The full compliance report returned for one image."""
    overall_score: int
    lod_target: str
    element_name: str
    summary: str
    geometry: AnalysisSection
    parameters: AnalysisSection
    information: AnalysisSection

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """Build from the wire (camelCase) form. Expects data already validated."""
        return cls(
            overall_score=int(round(data["overallScore"])),
            lod_target=data["lodTarget"],
            element_name=data["elementName"],
            summary=data["summary"],
            geometry=AnalysisSection.from_dict(data["geometry"]),
            parameters=AnalysisSection.from_dict(data["parameters"]),
            information=AnalysisSection.from_dict(data["information"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "lodTarget": self.lod_target,
            "elementName": self.element_name,
            "summary": self.summary,
            "geometry": self.geometry.to_dict(),
            "parameters": self.parameters.to_dict(),
            "information": self.information.to_dict(),
        }

    def sections(self) -> List[Tuple[str, AnalysisSection]]:
        return [(name, getattr(self, name)) for name in FACETS]


@dataclass(frozen=True)
class EncodedImage:
    payload: str        # bare base64, no data-URL prefix
    mime_type: str
    digest: str         # md5 of the raw bytes, used to spot a re-uploaded file
    size: int = 0

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.payload}"


@dataclass(frozen=True)
class HistoryItem:
    id: str
    timestamp: float
    image_url: str
    result: AnalysisResult
    target_lod: LODLevel = LODLevel.LOD300
