"""
Reporting module.

Shapes session results for downstream consumers:
- Prompt payload and prompt text for the generative-text service
- Learning-domain screening report for reviewers
- Offline assessment when that service is unavailable
"""

from .prompt_builder import (
    build_prompt_payload,
    build_screening_report,
    generate_llm_prompt,
    generate_local_assessment,
)

__all__ = [
    'build_prompt_payload',
    'build_screening_report',
    'generate_llm_prompt',
    'generate_local_assessment',
]
