"""Three-phase diagram generation pipeline.

Phase 1 asks the model to explain the architecture from the file tree
and README, phase 2 maps the explained components onto the file tree,
and phase 3 draws the Mermaid.js diagram from both. Each phase's prompt
is built from the previous phase's extracted output, so phases always
run strictly in order. A failure in any phase aborts the whole run.
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import anthropic

from repodiagram.errors import (
    GenerationCancelledError,
    InvalidInstructionsError,
    PhaseError,
)
from repodiagram.generators.llm_client import LLMClient
from repodiagram.generators.prompts import (
    BAD_INSTRUCTIONS,
    SYSTEM_EXPLAIN_PROMPT,
    SYSTEM_MAPPING_PROMPT,
    diagram_system_prompt,
)
from repodiagram.generators.template_manager import TemplateManager

logger = logging.getLogger(__name__)

PHASE_COUNT = 3

PHASE_DESCRIPTIONS = {
    1: "Analyzing repository structure",
    2: "Mapping components to files",
    3: "Generating Mermaid diagram",
}

ProgressCallback = Callable[[int, str], None]
ChunkCallback = Callable[[int, str], None]

_LEADING_FENCE = re.compile(r"\A```(?:[\w+.-]+[ \t]*(?=\r?\n))?")
_TRAILING_FENCE = "```"


def extract_tag(text: str, tag: str) -> str:
    """Extract the interior of the first ``<tag>...</tag>`` span.

    The match is non-greedy and spans newlines, so the first opening tag
    pairs with the nearest closing tag after it. A response without the
    tag is treated as already being the payload.

    Args:
        text: Raw model response.
        tag: Tag name without angle brackets.

    Returns:
        The trimmed interior of the first span, or the whole text trimmed.
    """
    name = re.escape(tag)
    match = re.search(rf"<{name}>(.*?)</{name}>", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text.strip()


def clean_output(text: str) -> str:
    """Strip incidental code-fence wrapping from diagram text.

    Removes one leading fence and one trailing fence. A word directly
    after the opening fence is dropped as a language tag (``mermaid``)
    only when a line break follows it, so a fence glued to ``graph TD``
    keeps the diagram keyword.

    Args:
        text: Raw phase 3 response.

    Returns:
        The diagram text without surrounding fences or whitespace.
    """
    content = text.strip()
    content = _LEADING_FENCE.sub("", content, count=1)
    if content.endswith(_TRAILING_FENCE):
        content = content[: -len(_TRAILING_FENCE)]
    return content.strip()


@dataclass
class PhaseResult:
    """Output of a single pipeline phase.

    Attributes:
        phase: 1-based phase number.
        raw: The complete response text.
        payload: The extracted (phases 1-2) or sanitized (phase 3) text.
    """

    phase: int
    raw: str
    payload: str


@dataclass(frozen=True)
class GenerationResult:
    """Extracted outputs of a complete pipeline run.

    Attributes:
        explanation: Architecture explanation from phase 1.
        mapping: Component-to-path mapping from phase 2.
        diagram: Sanitized Mermaid.js diagram from phase 3.
    """

    explanation: str
    mapping: str
    diagram: str


class DiagramGenerator:
    """Runs the explain, map and diagram phases against the LLM.

    Supports a blocking mode, where each phase waits for the complete
    response, and a streaming mode, where each response is consumed
    chunk by chunk before extraction.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        template_manager: Optional[TemplateManager] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            llm_client: The LLM client for API calls.
            template_manager: Template manager for prompts.
        """
        self.llm = llm_client
        self.templates = template_manager or TemplateManager()

    def generate(
        self,
        file_tree: str,
        readme: Optional[str] = None,
        instructions: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """Generate a diagram, waiting for each phase's full response.

        Args:
            file_tree: Newline-joined file tree listing.
            readme: README content, if any.
            instructions: Optional custom instructions for phase 3.
            on_progress: Called with (phase, description) as each phase
                starts.
            cancel_event: When set, the run stops at the next phase
                boundary. A blocking request already in flight is not
                interrupted; it is bounded only by the client timeout.
                Use generate_streaming to abort mid-response.

        Returns:
            The extracted explanation, mapping and diagram.

        Raises:
            PhaseError: If an API call fails.
            GenerationCancelledError: If the run is cancelled or times out.
            InvalidInstructionsError: If the model rejects the instructions.
        """

        def call(phase: int, system: str, prompt: str) -> str:
            return self._complete(phase, system, prompt)

        return self._run(file_tree, readme, instructions, call, on_progress, cancel_event)

    def generate_streaming(
        self,
        file_tree: str,
        readme: Optional[str] = None,
        instructions: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_chunk: Optional[ChunkCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """Generate a diagram, consuming each phase's response as a stream.

        Chunks are concatenated in arrival order and extraction happens
        only once a phase's stream has ended.

        Args:
            file_tree: Newline-joined file tree listing.
            readme: README content, if any.
            instructions: Optional custom instructions for phase 3.
            on_progress: Called with (phase, description) as each phase
                starts.
            on_chunk: Called with (phase, chunk) for every received chunk.
            cancel_event: When set, the in-flight stream is closed and the
                run stops.

        Returns:
            The extracted explanation, mapping and diagram.

        Raises:
            PhaseError: If an API call fails.
            GenerationCancelledError: If the run is cancelled or times out.
            InvalidInstructionsError: If the model rejects the instructions.
        """

        def call(phase: int, system: str, prompt: str) -> str:
            return self._stream(phase, system, prompt, on_chunk, cancel_event)

        return self._run(file_tree, readme, instructions, call, on_progress, cancel_event)

    def _run(
        self,
        file_tree: str,
        readme: Optional[str],
        instructions: Optional[str],
        call: Callable[[int, str, str], str],
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> GenerationResult:
        instructions = instructions.strip() if instructions else None

        self._start_phase(1, on_progress, cancel_event)
        prompt = self.templates.render_explain_prompt(file_tree, readme)
        explained = self._extract(1, call(1, SYSTEM_EXPLAIN_PROMPT, prompt), "explanation")

        self._start_phase(2, on_progress, cancel_event)
        prompt = self.templates.render_mapping_prompt(explained.payload, file_tree)
        mapped = self._extract(
            2, call(2, SYSTEM_MAPPING_PROMPT, prompt), "component_mapping"
        )

        self._start_phase(3, on_progress, cancel_event)
        prompt = self.templates.render_diagram_prompt(
            explained.payload, mapped.payload, instructions
        )
        raw = call(3, diagram_system_prompt(bool(instructions)), prompt)
        drawn = PhaseResult(phase=3, raw=raw, payload=clean_output(raw))

        if drawn.payload == BAD_INSTRUCTIONS:
            logger.warning("Model rejected the custom instructions")
            raise InvalidInstructionsError()

        logger.info("Generated diagram (%d lines)", drawn.payload.count("\n") + 1)
        return GenerationResult(
            explanation=explained.payload,
            mapping=mapped.payload,
            diagram=drawn.payload,
        )

    @staticmethod
    def _extract(phase: int, raw: str, tag: str) -> PhaseResult:
        payload = extract_tag(raw, tag)
        logger.debug(
            "Phase %d: extracted <%s> (%d of %d chars)", phase, tag, len(payload), len(raw)
        )
        return PhaseResult(phase=phase, raw=raw, payload=payload)

    @staticmethod
    def _start_phase(
        phase: int,
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError(phase)

        description = PHASE_DESCRIPTIONS[phase]
        logger.info("Phase %d/%d: %s", phase, PHASE_COUNT, description)
        if on_progress is not None:
            on_progress(phase, description)

    def _complete(self, phase: int, system: str, prompt: str) -> str:
        try:
            result = self.llm.generate(prompt, system=system)
        except anthropic.APITimeoutError as e:
            raise GenerationCancelledError(phase, e) from e
        except anthropic.APIError as e:
            raise PhaseError(phase, e) from e
        return result.content

    def _stream(
        self,
        phase: int,
        system: str,
        prompt: str,
        on_chunk: Optional[ChunkCallback],
        cancel_event: Optional[threading.Event],
    ) -> str:
        chunks: list[str] = []
        stream = self.llm.stream(prompt, system=system)
        try:
            for chunk in stream:
                if cancel_event is not None and cancel_event.is_set():
                    raise GenerationCancelledError(phase)
                chunks.append(chunk)
                if on_chunk is not None:
                    on_chunk(phase, chunk)
        except anthropic.APITimeoutError as e:
            raise GenerationCancelledError(phase, e) from e
        except anthropic.APIError as e:
            raise PhaseError(phase, e) from e
        finally:
            stream.close()
        return "".join(chunks)
