"""Enrichment data models."""

from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from coursescribe.models.base import CamelModel

DIFFICULTY_LEVELS = ("básico", "intermedio", "avanzado")
DEFAULT_DIFFICULTY = "intermedio"


def _or_default(value: Any, default: Any) -> Any:
    """Replace missing or blank values with a default."""
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    if isinstance(value, list):
        items = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return items or default
    return value


class EnrichmentSource(str, Enum):
    """How the enrichment artifact was produced."""

    MODEL = "model"
    UNPARSED = "unparsed"
    TEMPLATE = "template"


class EducationalStructure(CamelModel):
    """Four-part pedagogical outline of a lesson."""

    introduction: str = "Introducción al tema principal"
    main_concepts: list[str] = Field(
        default_factory=lambda: ["Conceptos extraídos del video"]
    )
    examples: list[str] = Field(
        default_factory=lambda: ["Ejemplos mencionados en la clase"]
    )
    conclusion: str = "Resumen de puntos clave"

    @field_validator("introduction", "conclusion", mode="before")
    @classmethod
    def _text_defaults(cls, value: Any, info) -> Any:
        return _or_default(value, cls.model_fields[info.field_name].default)

    @field_validator("main_concepts", "examples", mode="before")
    @classmethod
    def _list_defaults(cls, value: Any, info) -> Any:
        if isinstance(value, str):
            value = [value]
        return _or_default(value, cls.model_fields[info.field_name].default_factory())


class ContentAnalysis(CamelModel):
    """Structured analysis attached to an enriched transcript."""

    summary: str = "Contenido educativo generado a partir de transcripción de video"
    key_topics: list[str] = Field(default_factory=lambda: ["Tema académico"])
    difficulty: str = DEFAULT_DIFFICULTY
    recommendations: list[str] = Field(
        default_factory=lambda: [
            "Revisar el material complementario",
            "Practicar con ejercicios",
        ]
    )
    educational_structure: EducationalStructure = Field(
        default_factory=EducationalStructure
    )

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, value: Any) -> Any:
        return _or_default(value, cls.model_fields["summary"].default)

    @field_validator("key_topics", "recommendations", mode="before")
    @classmethod
    def _list_defaults(cls, value: Any, info) -> Any:
        if isinstance(value, str):
            value = [value]
        return _or_default(value, cls.model_fields[info.field_name].default_factory())

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in DIFFICULTY_LEVELS:
            return value.strip().lower()
        return DEFAULT_DIFFICULTY

    @field_validator("educational_structure", mode="before")
    @classmethod
    def _structure_default(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, EducationalStructure)) else {}


class EnrichmentResult(CamelModel):
    """Output of the enrichment stage."""

    content: str
    analysis: ContentAnalysis
    source: EnrichmentSource = EnrichmentSource.MODEL
