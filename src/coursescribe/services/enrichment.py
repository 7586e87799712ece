"""Enrichment of raw transcripts into structured educational content."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError

from coursescribe.errors import EnrichmentError
from coursescribe.models.enrichment import (
    ContentAnalysis,
    EducationalStructure,
    EnrichmentResult,
    EnrichmentSource,
)
from coursescribe.security.sanitizer import SanitizedMetadata
from coursescribe.services.prompts import build_enrichment_prompt, render_template_enrichment
from coursescribe.services.providers.base import IModelProvider

logger = logging.getLogger(__name__)


def strip_json_fences(raw_text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    text = raw_text.strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()
    return text


def minimal_analysis(title: str) -> ContentAnalysis:
    """Analysis used when the model answered but not with valid JSON."""
    return ContentAnalysis(
        summary="Contenido educativo generado a partir de transcripción de video",
        key_topics=[title],
        difficulty="intermedio",
        recommendations=["Revisar el material complementario", "Practicar con ejercicios"],
        educational_structure=EducationalStructure(
            introduction="Introducción al tema principal",
            main_concepts=["Conceptos extraídos del video"],
            examples=["Ejemplos mencionados en la clase"],
            conclusion="Resumen de puntos clave",
        ),
    )


def template_analysis(title: str) -> ContentAnalysis:
    """Analysis used when the model could not be reached at all."""
    return ContentAnalysis(
        summary="Análisis básico de contenido de video educativo",
        key_topics=[title],
        difficulty="intermedio",
        recommendations=["Revisar transcripción completa", "Consultar material adicional"],
        educational_structure=EducationalStructure(
            introduction="Contenido extraído de video educativo",
            main_concepts=["Conceptos del video"],
            examples=["Ejemplos del contenido"],
            conclusion="Puntos importantes a recordar",
        ),
    )


class EnrichmentGenerator:
    """Turns a transcript into enriched content plus a ContentAnalysis.

    Degrades instead of failing: unparseable model output is kept as the
    content with a minimal analysis, and a failed model call produces a
    templated enrichment built from the transcript alone.
    """

    def __init__(self, provider: IModelProvider, timeout: float | None = None) -> None:
        self._provider = provider
        self._timeout = timeout

    async def enrich(self, transcript: str, metadata: SanitizedMetadata) -> EnrichmentResult:
        """Enrich ``transcript``.

        Args:
            transcript: Transcript text from any tier.
            metadata: Sanitized title and course name.

        Returns:
            EnrichmentResult; ``source`` tells which path produced it.

        Raises:
            EnrichmentError: If the transcript is empty.
        """
        if not transcript or not transcript.strip():
            raise EnrichmentError("Cannot enrich an empty transcript")

        prompt = build_enrichment_prompt(transcript, metadata)

        try:
            if self._timeout is not None:
                result = await asyncio.wait_for(
                    self._provider.generate_text(prompt), timeout=self._timeout
                )
            else:
                result = await self._provider.generate_text(prompt)
        except asyncio.TimeoutError:
            logger.warning("Enrichment call timed out after %ss, using template", self._timeout)
            return self._template_result(transcript, metadata)
        except Exception:
            logger.exception("Enrichment call raised, using template")
            return self._template_result(transcript, metadata)

        if not result.ok:
            logger.warning("Enrichment call failed (%s), using template", result.error)
            return self._template_result(transcript, metadata)

        return self._parse_response(result.text, metadata)

    def _parse_response(self, raw_text: str, metadata: SanitizedMetadata) -> EnrichmentResult:
        """Parse the model's JSON answer, degrading to raw text on failure."""
        try:
            data: Any = json.loads(strip_json_fences(raw_text))
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            analysis_data = data.get("analysis")
            analysis = ContentAnalysis.model_validate(
                analysis_data if isinstance(analysis_data, dict) else {"keyTopics": [metadata.title]}
            )
        except (ValueError, ValidationError) as exc:
            logger.warning("Enrichment response is not valid JSON, using raw text: %s", exc)
            return EnrichmentResult(
                content=raw_text.strip(),
                analysis=minimal_analysis(metadata.title),
                source=EnrichmentSource.UNPARSED,
            )

        content = data.get("enrichedContent")
        if not isinstance(content, str) or not content.strip():
            content = raw_text.strip()

        logger.info(
            "Enrichment parsed: %d chars, %d key topics",
            len(content),
            len(analysis.key_topics),
        )
        return EnrichmentResult(content=content, analysis=analysis, source=EnrichmentSource.MODEL)

    @staticmethod
    def _template_result(transcript: str, metadata: SanitizedMetadata) -> EnrichmentResult:
        return EnrichmentResult(
            content=render_template_enrichment(transcript, metadata),
            analysis=template_analysis(metadata.title),
            source=EnrichmentSource.TEMPLATE,
        )
