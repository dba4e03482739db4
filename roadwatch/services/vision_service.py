"""
Vision Service
Sends incident photos to an OpenAI-compatible vision/language model and asks
for a structured damage assessment.

Any transport, HTTP or parsing problem becomes ImageAnalysisResult(success=False)
so that automatic processing is never aborted by an analysis glitch.
"""
import json
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from roadwatch.core.config import Settings, get_settings
from roadwatch.core.exceptions import ExternalAnalysisFailure
from roadwatch.models.incident import IncidentType
from roadwatch.schemas.analysis import (
    IMAGE_ANALYSIS_JSON_SCHEMA, ImageAnalysisData, ImageAnalysisResult,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a traffic accident analyst. Analyse the images and extract the "
    "important details as JSON."
)

USER_PROMPT = """Reported incident type: {incident_type}

Extract the following as JSON:
{{
  "description": "detailed description of the incident",
  "damageLevel": "damage level from 0-100",
  "affectedParts": ["damaged parts"],
  "severity": "severity level: low/medium/high/critical",
  "estimatedCost": "estimated repair cost in SAR",
  "recommendations": ["recommendations"]
}}"""


class VisionService:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or get_settings()
        self._client = client

    def build_payload(self, images: List[str], incident_type: IncidentType) -> dict:
        parsed = IncidentType.parse(incident_type)
        type_label = parsed.value if parsed else str(incident_type)
        image_contents = [
            {"type": "image_url", "image_url": {"url": image, "detail": "high"}}
            for image in images
        ]
        return {
            "model": self.settings.VISION_MODEL,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        *image_contents,
                        {"type": "text", "text": USER_PROMPT.format(incident_type=type_label)},
                    ],
                },
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "incident_analysis",
                    "strict": True,
                    "schema": IMAGE_ANALYSIS_JSON_SCHEMA,
                },
            },
        }

    def _post(self, payload: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {self.settings.VISION_API_KEY}",
            "Content-Type": "application/json",
        }
        if self._client is not None:
            response = self._client.post(self.settings.VISION_API_URL, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()

        with httpx.Client(timeout=self.settings.VISION_TIMEOUT_SECONDS) as client:
            response = client.post(self.settings.VISION_API_URL, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()

    def request_analysis(self, images: List[str], incident_type: IncidentType) -> ImageAnalysisData:
        """
        Call the model and parse its answer.

        Raises:
            ExternalAnalysisFailure: on transport errors, non-2xx responses or
                content that does not match the declared schema.
        """
        if not self.settings.vision_configured:
            raise ExternalAnalysisFailure("Vision API is not configured")
        if not images:
            raise ExternalAnalysisFailure("No images supplied")

        payload = self.build_payload(images, incident_type)
        try:
            body = self._post(payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ExternalAnalysisFailure(f"Vision API request failed: {exc}") from exc
        except ValueError as exc:
            raise ExternalAnalysisFailure(f"Vision API returned invalid JSON: {exc}") from exc

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalAnalysisFailure(f"Unexpected Vision API response shape: {exc}") from exc
        if not isinstance(content, str):
            raise ExternalAnalysisFailure("Vision API returned no text content")

        try:
            return ImageAnalysisData.model_validate(json.loads(content))
        except (ValueError, ValidationError) as exc:
            raise ExternalAnalysisFailure(f"Could not parse analysis content: {exc}") from exc

    def analyze_images(self, images: List[str], incident_type: IncidentType) -> ImageAnalysisResult:
        try:
            data = self.request_analysis(images, incident_type)
        except ExternalAnalysisFailure as exc:
            logger.error(f"[VISION] Error analyzing images: {exc}")
            return ImageAnalysisResult(success=False, extracted_data=None)

        logger.info(
            f"[VISION] Analysed {len(images)} image(s): damage={data.damage_level} severity={data.severity}"
        )
        return ImageAnalysisResult(success=True, extracted_data=data)
