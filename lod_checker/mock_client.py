# lod_checker/mock_client.py
import asyncio
import logging
from copy import deepcopy

from lod_checker.client import AnalysisClient
from lod_checker.models import AnalysisResult, LODLevel
from lod_checker.schema import validate_report

logger = logging.getLogger(__name__)

# -----------------------
# Canned report
# -----------------------

SAMPLE_REPORT = {
    "overallScore": 72,
    "lodTarget": "LOD 300",
    "elementName": "Steel Beam (W-Section)",
    "summary": "Beam geometry is well defined but connection detailing is incomplete.",
    "geometry": {
        "score": 78,
        "status": "Partial",
        "observations": ["Flange and web dimensions are modeled", "End plates are present"],
        "missing": ["Bolt holes at the end plates"],
        "recommendations": ["Model bolt patterns for the moment connections"],
    },
    "parameters": {
        "score": 65,
        "status": "Partial",
        "observations": ["Element looks like a generic family"],
        "missing": ["Steel grade", "Fire rating"],
        "recommendations": ["Add material and fire-rating parameters"],
    },
    "information": {
        "score": 74,
        "status": "Compliant",
        "observations": ["Suitable for coordination"],
        "missing": [],
        "recommendations": [],
    },
}


class MockAnalysisClient(AnalysisClient):
    """Offline client returning SAMPLE_REPORT (retargeted to the requested LOD)."""

    name = "mock"

    def __init__(self, report: dict = None, delay: float = 0.0):
        self.report = deepcopy(report or SAMPLE_REPORT)
        self.delay = delay
        self.calls = []

    async def analyze(self, image, target_lod, element_type=None, context=None, mime_type="image/png"):
        self.calls.append({
            "target_lod": LODLevel(target_lod),
            "element_type": element_type,
            "context": context,
            "mime_type": mime_type,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        data = deepcopy(self.report)
        data["lodTarget"] = LODLevel(target_lod).value
        if element_type:
            data["elementName"] = element_type
        logger.info("mock analysis for %s", data["lodTarget"])
        return AnalysisResult.from_dict(validate_report(data))
