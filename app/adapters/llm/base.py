from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Model backend used by the assessment service.

	Implementations must map every provider failure to ``LLMAppError`` so the
	HTTP layer can answer 502/504 without knowing the provider.
	"""

	provider: str = "unknown"

	def _error_details(self, **extra: Any) -> dict[str, Any]:
		return {"provider": self.provider, **extra}

	@abstractmethod
	async def generate_json(
		self,
		prompt: str,
		*,
		schema: dict[str, Any] | None = None,
		**kwargs: Any,
	) -> dict[str, Any]:
		"""Ask the model for a JSON object answering ``prompt``.

		``schema`` switches the provider into JSON mode; the caller still
		validates the shape. Extra keyword arguments are sampling options.
		"""
		...
