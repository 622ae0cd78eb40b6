"""Pre-defined prompts for the gateway agents."""

from .agent_tasks import KEYWORD_NOT_FOUND, render_keyword_prompt, render_sql_prompt
from .prompt_logger import PromptLogEntry, PromptLogger
from .survey_clustering import render_clustering_prompt, render_reassignment_prompt
from .template import PromptTemplate, RenderedPrompt

__all__ = [
    "PromptTemplate",
    "RenderedPrompt",
    "PromptLogger",
    "PromptLogEntry",
    "KEYWORD_NOT_FOUND",
    "render_clustering_prompt",
    "render_reassignment_prompt",
    "render_keyword_prompt",
    "render_sql_prompt",
]
