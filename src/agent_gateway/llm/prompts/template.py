"""Prompt templates rendered into chat messages for the oracle."""

from __future__ import annotations

from dataclasses import dataclass
from string import Template
from textwrap import dedent
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class RenderedPrompt:
    """Named system/user pair ready to be sent to a provider."""

    name: str
    system: str
    user: str

    def to_messages(self) -> list[dict[str, str]]:
        """OpenAI-style message list; an empty system part is left out."""
        messages = []
        if self.system:
            messages.append({"role": "system", "content": self.system})
        messages.append({"role": "user", "content": self.user})
        return messages


@dataclass(slots=True, frozen=True)
class PromptTemplate:
    """``$placeholder`` template for one oracle task.

    Rendering fails loudly when a placeholder has no value, so a prompt never
    reaches the model with a literal ``$question`` left in it.
    """

    name: str
    system: str
    user: str

    @property
    def placeholders(self) -> set[str]:
        names: set[str] = set()
        for text in (self.system, self.user):
            for match in Template.pattern.finditer(text):
                name = match.group("named") or match.group("braced")
                if name:
                    names.add(name)
        return names

    def render(self, context: Mapping[str, Any]) -> RenderedPrompt:
        missing = sorted(self.placeholders - set(context))
        if missing:
            raise KeyError(f"Prompt {self.name} is missing values for: {', '.join(missing)}")
        values = {key: str(value) for key, value in context.items()}
        return RenderedPrompt(
            name=self.name,
            system=Template(dedent(self.system).strip()).substitute(values),
            user=Template(dedent(self.user).strip()).substitute(values),
        )
