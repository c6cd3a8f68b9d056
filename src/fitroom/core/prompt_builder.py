"""Try-on prompt compilation.

The prompt is a fixed template with two variable parts: a fit clause chosen
by exact match on :class:`FitType`, and optional free-text requirements from
the user.

Template Structure::

    [Fixed: person + garment composition instruction]
    The clothing should have a [Fit Clause].
    Additional requirements: [Extra Instructions].     (only when non-blank)
    [Fixed: integration and realism directive]
    [Fixed: negative constraints]

Sentences are joined with single spaces.

Usage
-----
::

    prompt = build_prompt(GenerationOptions(fit=FitType.REGULAR, extra_instructions="tucked in"))
"""

from __future__ import annotations

from enum import Enum

from .errors import ConfigurationError


class FitType(str, Enum):
    """How the garment should sit on the body."""

    SLIM = "slim"
    REGULAR = "regular"
    OVERSIZE = "oversize"


FIT_CLAUSES: dict[FitType, str] = {
    FitType.SLIM: "tight-fitting, slim fit, highlighting body contours",
    FitType.REGULAR: "regular fit, comfortable fit, tailored correctly",
    FitType.OVERSIZE: "oversized, baggy fit, loose fitting, streetwear style",
}

# ---------------------------------------------------------------------------
# Fixed sections.
# ---------------------------------------------------------------------------

_COMPOSITION_INSTRUCTION = (
    "Generate a high-quality photograph of the person from the first reference image "
    "wearing the garment from the second reference image."
)

_REALISM_DIRECTIVE = (
    "Ensure the garment integrates naturally with the body pose and lighting. "
    "Realistic fabric texture, detailed folds, photorealistic 8k."
)

_NEGATIVE_CONSTRAINTS = (
    "Do not generate cartoons, illustrations, or drawings. "
    "Avoid distorted body parts, extra limbs, bad anatomy, or blurry textures."
)


def fit_clause(fit: FitType | str | None) -> str:
    """Return the clause for *fit*.

    Strings are matched exactly against the enum values.

    Raises:
        ConfigurationError: If *fit* is missing or not a known fit.
    """
    try:
        return FIT_CLAUSES[FitType(fit)]
    except (ValueError, KeyError) as e:
        raise ConfigurationError(f"Unknown fit option: {fit!r}") from e


def build_prompt(options) -> str:
    """Compile the full prompt for a :class:`GenerationOptions` value.

    Args:
        options: Anything with ``fit`` and ``extra_instructions`` attributes.

    Returns:
        The prompt string.

    Raises:
        ConfigurationError: If ``options.fit`` is not a known fit.
    """
    parts: list[str] = [_COMPOSITION_INSTRUCTION]

    parts.append(f"The clothing should have a {fit_clause(options.fit)}.")

    extra = (options.extra_instructions or "").strip()
    if extra:
        parts.append(f"Additional requirements: {extra}.")

    parts.append(_REALISM_DIRECTIVE)
    parts.append(_NEGATIVE_CONSTRAINTS)

    return " ".join(parts)
