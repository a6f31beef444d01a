from brandscope.models.ai_provider import AiProvider
from brandscope.models.brand import Brand, Competitor
from brandscope.models.brand_prompt import BrandPrompt
from brandscope.models.brand_prompt_resource import BrandPromptResource

__all__ = [
    "AiProvider",
    "Brand",
    "BrandPrompt",
    "BrandPromptResource",
    "Competitor",
]
