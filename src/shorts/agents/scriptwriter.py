"""Script writer agent for drafting narrated shorts."""

import json
import logging

from pydantic import ValidationError as PydanticValidationError

from ..errors import RemoteGenerationError
from ..models import Script
from ..services.base import ScriptRequest
from .base import BaseAgent

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a scriptwriter for vertical short-form videos.
You break a topic into short narrated scenes, each paired with a detailed visual prompt.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an object with exactly these keys:
  "title": string,
  "scenes": array of {"text": string, "imagePrompt": string},
  "bgmPrompts": array of strings"""


class ScriptWriterAgent(BaseAgent[ScriptRequest, Script]):
    """Agent for drafting a short's script from a topic.

    Produces a title, one narration line and visual prompt per scene, and
    background music descriptions.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "ScriptWriterAgent"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt for script drafting."""
        return SYSTEM_PROMPT

    async def write_script(self, request: ScriptRequest) -> Script:
        return await self.run(request)

    async def run(self, input_data: ScriptRequest) -> Script:
        """Draft a script for the requested topic.

        Args:
            input_data: Topic, scene count, style and narration settings.

        Returns:
            Parsed Script with a non-empty list of BGM prompts.

        Raises:
            RemoteGenerationError: If the request fails or the response
                cannot be parsed as a script.
        """
        self._logger.info(
            f"Drafting script for: '{input_data.topic}' "
            f"({input_data.scene_count} scenes, style: {input_data.style})"
        )

        prompt = self._build_prompt(input_data)
        response = await self._create_message(
            prompt=prompt,
            max_tokens=4096,
            temperature=0.8,
        )

        script = self._parse_response(response)
        self._logger.info(f"Drafted '{script.title}' with {len(script.scenes)} scenes")
        return script

    def _build_prompt(self, input_data: ScriptRequest) -> str:
        """Build the user prompt for script drafting."""
        return "\n".join([
            f"Create a professional {input_data.target_seconds}-second YouTube Shorts "
            f"script about '{input_data.topic}'.",
            "",
            "CRITICAL INSTRUCTIONS:",
            f"1. Break the content into exactly {input_data.scene_count} logical scenes.",
            "2. For EACH scene, provide:",
            f"   - 'text': A short, punchy sentence IN {input_data.language.upper()} to be narrated.",
            "   - 'imagePrompt': A technical and descriptive visual prompt IN ENGLISH "
            f"following the '{input_data.style}' style.",
            "3. CULTURAL & AESTHETIC ACCURACY:",
            "   - Depict currency, signage and everyday objects accurately for the "
            "topic's country and culture.",
            "   - Use modern, ordinary or contemporary minimalist decor for interiors; "
            "avoid decor from unrelated cultures.",
            f"   - Ensure food, places and people look authentic to the '{input_data.topic}' context.",
            f"4. The total script should be roughly {input_data.target_seconds} seconds when narrated.",
            "5. Provide 1 BGM description for the entire video.",
            "",
            "Respond in JSON format only.",
        ])

    def _parse_response(self, response: str) -> Script:
        """Parse the model response into a Script.

        Raises:
            RemoteGenerationError: If the response is not a valid script.
        """
        json_str = self._extract_json(response)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse JSON: {e}")
            self._logger.debug(f"Raw response: {response}")
            raise RemoteGenerationError(f"Invalid JSON in script response: {e}") from e

        if not isinstance(data, dict):
            raise RemoteGenerationError("Script response is not a JSON object")

        try:
            script = Script.model_validate(data)
        except PydanticValidationError as e:
            raise RemoteGenerationError(f"Malformed script response: {e}") from e

        if not script.scenes:
            raise RemoteGenerationError("Script response contains no scenes")
        return script

    def _extract_json(self, response: str) -> str:
        """Extract JSON from a response that may contain markdown or other text."""
        # Try to find JSON in code blocks
        if "```json" in response:
            start = response.find("```json") + 7
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        if "```" in response:
            start = response.find("```") + 3
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        start = response.find("{")
        if start != -1:
            depth = 0
            in_string = False
            escaped = False
            for i, char in enumerate(response[start:], start):
                if in_string:
                    if escaped:
                        escaped = False
                    elif char == "\\":
                        escaped = True
                    elif char == '"':
                        in_string = False
                elif char == '"':
                    in_string = True
                elif char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        return response[start:i + 1]

        return response.strip()
