import logging

import openai
from openai import AsyncOpenAI

from tutor_api.config import Settings
from tutor_api.core.errors import ProviderAuthError, UpstreamError

logger = logging.getLogger(__name__)


def mock_response(question: str) -> str:
    """Ответ-заглушка, когда ключ провайдера не настроен"""
    return (
        f'This is a simulated AI response to: "{question}"\n\n'
        "To enable real AI responses:\n"
        "1. Get an API key from https://platform.openai.com/api-keys\n"
        "2. Add it to your .env file: OPENAI_API_KEY=sk-your-key\n"
        "3. Restart the server\n\n"
        "For now, this app will work with mock responses so you can test all other features!"
    )


class LLMService:
    """
    Простой класс для вызова LLM.

    Без ключа клиент не создаётся и generate отдаёт заглушку.
    """

    def __init__(self, settings: Settings):
        self.model = settings.llm_model_name
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.system_prompt = settings.system_prompt
        self.client = None

        if settings.llm_enabled:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
            )
        else:
            logger.warning("⚠️ OPENAI_API_KEY не настроен, используем заглушку")

    @property
    def is_mock(self) -> bool:
        return self.client is None

    async def generate(self, question: str) -> str:
        """
        :param question: Вопрос пользователя
        :return: Ответ репетитора
        :raises ProviderAuthError: провайдер не принял ключ
        :raises UpstreamError: любая другая ошибка провайдера
        """
        if self.client is None:
            return mock_response(question)

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": question},
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.AuthenticationError as e:
            logger.error("Провайдер отклонил ключ: %s", e)
            raise ProviderAuthError("OpenAI API key invalid") from e
        except openai.OpenAIError as e:
            logger.error("Генерация не состоялась, ошибка: %s", e)
            raise UpstreamError("Failed to generate tutoring response") from e

        answer = response.choices[0].message.content or ""
        if response.usage is not None:
            logger.info("LLM ответил (%s токенов)", response.usage.total_tokens)

        if not answer.strip():
            # Пустой ответ не сохраняем
            raise UpstreamError("Failed to generate tutoring response")

        return answer
