"""
Template Service - AI-generated invoice templates

Uses OpenAI to produce a complete HTML invoice template from a company's
name, branding guidelines, late fee conditions and optional logo.
"""
import logging
import re
from typing import Optional

from openai import AsyncOpenAI

from invoicer.config import Settings
from invoicer.exceptions import TemplateGenerationError
from invoicer.schemas.template import CustomizationRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert in creating visually appealing and professional invoice templates."

TEMPLATE_PROMPT = """Based on the company branding guidelines and late fee conditions, generate an HTML invoice template.

Company Name: {company_name}
Branding Guidelines: {company_branding}
Late Fee Conditions: {late_fee_conditions}
{logo_line}
Return the complete HTML invoice template as a string.
Make sure the invoice has a clean, tabular layout for invoice details and totals.
Mark where the line item table goes with the placeholder {{{{invoice_table}}}} and where the totals go with {{{{totals}}}}.
You may also use {{{{invoice_number}}}}, {{{{client_name}}}}, {{{{issue_date}}}} and {{{{due_date}}}}.
Use Inter font for a clean, modern, objective, and neutral appearance.
Use soft blue (#A0BFE0) as the primary color, light gray (#F0F4F8) as the background color, and muted green (#8FBC8F) for positive actions and highlights.
Return only the HTML, without markdown code fences."""

_CODE_FENCE = re.compile(r"^```(?:html)?\s*|\s*```$", re.IGNORECASE)


class TemplateService:
    """Generate invoice HTML templates using AI"""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.openai_model
        self.temperature = settings.template_temperature
        self.max_tokens = settings.template_max_tokens
        self.openai_client = client
        if self.openai_client is None and settings.openai_api_key:
            self.openai_client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.template_timeout_seconds,
            )
            logger.info("TemplateService initialized with OpenAI")
        elif self.openai_client is None:
            logger.warning("OpenAI API key not configured - template generation will be disabled")

    @property
    def enabled(self) -> bool:
        return self.openai_client is not None

    def _build_messages(self, request: CustomizationRequest) -> list:
        prompt = TEMPLATE_PROMPT.format(
            company_name=request.company_name,
            company_branding=request.company_branding,
            late_fee_conditions=request.late_fee_conditions,
            logo_line="Company Logo: see the attached image and place it in the header.\n" if request.company_logo else "",
        )
        user_content = [{"type": "text", "text": prompt}]
        if request.company_logo:
            user_content.append({"type": "image_url", "image_url": {"url": request.company_logo}})
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    @staticmethod
    def _clean_template(text: str) -> str:
        return _CODE_FENCE.sub("", text.strip()).strip()

    async def generate(self, request: CustomizationRequest) -> str:
        """
        Generate an HTML invoice template.

        Raises:
            TemplateGenerationError: the service is not configured, the call
                failed, or the model returned no HTML
        """
        if not self.openai_client:
            raise TemplateGenerationError("OpenAI client not initialized - check OPENAI_API_KEY")

        try:
            response = await self.openai_client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(request),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error(f"Failed to generate invoice template: {e}")
            raise TemplateGenerationError(f"Failed to generate invoice template: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        template = self._clean_template(content or "")
        if "<" not in template:
            raise TemplateGenerationError("Model did not return an HTML template")

        logger.info(f"Generated invoice template for '{request.company_name}' ({len(template)} chars)")
        return template
