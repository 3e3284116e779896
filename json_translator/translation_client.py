"""Prompt construction and the OpenAI chat-completion call used to translate a batch."""
import logging
from typing import List, Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError
)
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam
)

from json_translator.exceptions import TranslationCallFailure

logger = logging.getLogger(__name__)

# Stands in for literal newlines so that each value travels as a single line.
NEWLINE_PLACEHOLDER = "{{NEWLINE_PLACEHOLDER}}"

CONTENT_SEPARATOR = "------------ The following is the content that needs to be translated ------------"

BASE_SYSTEM_PROMPT = (
    "You are a professional translator specializing in localizing web content. "
    "Translate the given texts accurately while preserving all HTML structure and the special "
    f"placeholder {NEWLINE_PLACEHOLDER}. Keep every HTML tag and every placeholder in its original "
    "form and position. Translate only the human-readable content between tags, never the tags "
    "themselves or the placeholder. Provide only the translated texts, one per line, in the "
    "original order. Do not add comments, explanations, or additional formatting."
)


def build_system_prompt(custom_prompt: Optional[str] = None) -> str:
    """
    Build the system instructions for a translation request.

    Args:
        custom_prompt: Extra instructions appended after the base prompt.

    Returns:
        str: The system prompt.
    """
    if custom_prompt:
        return f"{BASE_SYSTEM_PROMPT} {custom_prompt}"
    return BASE_SYSTEM_PROMPT


def build_user_prompt(texts: List[str], target_language: str) -> str:
    """Build the user message listing ``texts``, one per line, for translation into ``target_language``."""
    joined_texts = "\n".join(texts)
    return (
        f"Translate the following {len(texts)} texts to {target_language}. "
        f"Maintain the original order and preserve all HTML tags and the placeholder "
        f"{NEWLINE_PLACEHOLDER} exactly as they appear. Do not translate the content inside HTML "
        f"tags or the placeholder. Return each translated text on a new line, without any "
        f"explanations, quotation marks, line numbers, or additional formatting.\n"
        f"{CONTENT_SEPARATOR}\n\n"
        f"{joined_texts}"
    )


class OpenAITranslationClient:
    """
    Sends batches of texts to the OpenAI chat completions API.

    The response is returned split into lines; checking that the line count
    matches what was sent is left to the caller.
    """

    def __init__(self, client: AsyncOpenAI, temperature: Optional[float] = None):
        self.client = client
        self.temperature = temperature

    async def translate(
            self,
            texts: List[str],
            target_language: str,
            system_instructions: str,
            model: str
    ) -> List[str]:
        """
        Translate ``texts`` into ``target_language`` with a single API call.

        Args:
            texts: Single-line texts to translate, in order.
            target_language: Display name of the target language (e.g., "German").
            system_instructions: The system prompt.
            model: The model identifier, passed to the API unchanged.

        Returns:
            List[str]: The lines of the model's answer.

        Raises:
            TranslationCallFailure: If the API call fails or returns no choices.
        """
        if not texts:
            return []

        request = {
            "model": model,
            "messages": [
                ChatCompletionSystemMessageParam(role="system", content=system_instructions),
                ChatCompletionUserMessageParam(role="user", content=build_user_prompt(texts, target_language))
            ],
        }
        if self.temperature is not None:
            request["temperature"] = self.temperature

        logger.debug("Requesting %d translation(s) into %s with model '%s'.", len(texts), target_language, model)
        try:
            response = await self.client.chat.completions.create(**request)
        except APITimeoutError as api_exc:
            raise TranslationCallFailure(f"translation request timed out: {api_exc}") from api_exc
        except APIConnectionError as api_exc:
            raise TranslationCallFailure(f"could not reach the translation API: {api_exc}") from api_exc
        except APIStatusError as api_exc:
            raise TranslationCallFailure(
                f"translation API returned status {api_exc.status_code}: {api_exc.message}"
            ) from api_exc
        except OpenAIError as api_exc:
            raise TranslationCallFailure(f"{api_exc.__class__.__name__} - {api_exc}") from api_exc

        if not response.choices:
            raise TranslationCallFailure("translation API returned no choices")

        content = response.choices[0].message.content or ""
        logger.debug("--- RAW TRANSLATION RESPONSE ---\n%s", content)
        return content.split("\n")
