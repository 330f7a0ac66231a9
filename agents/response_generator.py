"""Response generator mapping classified intents to replies."""

import logging
from typing import Optional

from config.settings import Settings
from retrieval.catalog_provider import CatalogProvider
from retrieval.retrieval_service import RetrievalService
from schemas.agent import AgentAction, ActionType
from schemas.intent import Intent, IntentResult
from schemas.responses import GeneratedResponse

logger = logging.getLogger(__name__)


class ResponseGenerator:
    """Builds the reply text, follow-up suggestions and actions for a turn."""

    NOT_FOUND_SUGGESTIONS = [
        "Show all categories",
        "Browse featured products",
        "Search by category",
    ]
    CODE_HELP_SUGGESTIONS = [
        "Explain API endpoints",
        "Show code examples",
        "Help with integration",
    ]
    ANALYTICS_SUGGESTIONS = [
        "Product performance",
        "Category analysis",
        "Sales trends",
        "Customer insights",
    ]
    CAPABILITY_SUGGESTIONS = [
        "Show products",
        "Browse categories",
        "Help with API",
        "Business analytics",
    ]

    def __init__(
        self,
        retrieval: RetrievalService,
        catalog: CatalogProvider,
        settings: Optional[Settings] = None
    ):
        """
        Initialize with retrieval and catalog collaborators.

        Args:
            retrieval: Fuzzy retrieval over products, categories and docs
            catalog: Catalog used for recommendations
            settings: Application settings
        """
        self.retrieval = retrieval
        self.catalog = catalog
        self.settings = settings or Settings()

    def generate(self, intent: IntentResult, message: str) -> GeneratedResponse:
        """
        Generate a response for a classified message.

        Args:
            intent: Classifier output
            message: Original user message

        Returns:
            GeneratedResponse; handler failures become fallback text
        """
        if intent.intent == Intent.PRODUCT_SEARCH:
            return self._handle_product_search(message)
        elif intent.intent == Intent.PRODUCT_RECOMMENDATION:
            return self._handle_product_recommendation(message)
        elif intent.intent == Intent.PRODUCT_INQUIRY:
            return self._handle_product_inquiry(message, intent.entities)
        elif intent.intent == Intent.CODE_HELP:
            return self._handle_code_help(message)
        elif intent.intent == Intent.BUSINESS_ANALYTICS:
            return self._handle_business_analytics(message)
        else:
            # Intent.GENERAL_QUESTION and anything added to the enum later
            return self._handle_general_question(message)

    def _handle_product_search(self, query: str) -> GeneratedResponse:
        try:
            results = self.retrieval.search_products(query, 5)
        except Exception as e:
            logger.error(f"Error handling product search: {e}")
            return GeneratedResponse(
                message="I had trouble searching the catalog just now. Please try again in a moment.",
                suggestions=self.NOT_FOUND_SUGGESTIONS,
            )

        if not results:
            return GeneratedResponse(
                message=(
                    f'I couldn\'t find any products matching "{query}". '
                    "Could you provide more details or try different keywords?"
                ),
                suggestions=self.NOT_FOUND_SUGGESTIONS,
            )

        product_list = "\n".join(
            f"{i}. {r.title} - {r.description}" for i, r in enumerate(results, 1)
        )
        message = (
            f"I found {len(results)} products matching your search:\n\n{product_list}\n\n"
            "Would you like more details about any of these products?"
        )

        return GeneratedResponse(
            message=message,
            suggestions=[r.title for r in results],
            actions=[
                AgentAction(
                    type=ActionType.NAVIGATE,
                    payload={"productId": r.id},
                    description=f"View {r.title}",
                )
                for r in results
            ],
            sources=[r.title for r in results],
        )

    def _handle_product_recommendation(self, query: str) -> GeneratedResponse:
        # The catalog picks do not depend on the query text
        try:
            products = self.catalog.list_active_products(limit=5)
        except Exception as e:
            logger.error(f"Error handling product recommendation: {e}")
            return GeneratedResponse(
                message="I encountered an error while fetching recommendations. Please try again.",
                suggestions=["Search products", "Browse categories"],
            )

        if not products:
            return GeneratedResponse(
                message=(
                    "I don't have enough product information to make recommendations right now. "
                    "Please check back later."
                ),
                suggestions=["View all products", "Browse categories"],
            )

        lines = []
        for i, product in enumerate(products, 1):
            price = f"${product.price:,.2f}" if product.price is not None else "N/A"
            description = self._truncate(product.description)
            lines.append(f"{i}. **{product.name}** - {description} (Price: {price})")

        message = (
            "Based on your requirements, here are my recommendations:\n\n"
            + "\n\n".join(lines)
            + "\n\nThese products offer great value and quality. "
            "Would you like more details about any of them?"
        )

        return GeneratedResponse(
            message=message,
            suggestions=[f"Tell me more about {p.name}" for p in products],
            actions=[
                AgentAction(
                    type=ActionType.RECOMMEND,
                    payload={"productId": p.id},
                    description=f"View {p.name}",
                )
                for p in products
            ],
            sources=[p.name for p in products],
        )

    def _handle_product_inquiry(self, query: str, entities: list[str]) -> GeneratedResponse:
        try:
            results = self.retrieval.search_products(query, 3)
        except Exception as e:
            logger.error(f"Error handling product inquiry: {e}")
            results = []

        if not results:
            return GeneratedResponse(
                message=(
                    "I need more information to answer your question. "
                    "Which product are you asking about?"
                ),
                suggestions=["Show all products", "Search by name"],
            )

        product_list = "\n".join(f"- {r.title}" for r in results)
        return GeneratedResponse(
            message=(
                f"I can help you with information about these products:\n\n{product_list}\n\n"
                "Please let me know which one you'd like to know more about."
            ),
            suggestions=[r.title for r in results],
            sources=[r.title for r in results],
        )

    def _handle_code_help(self, query: str) -> GeneratedResponse:
        try:
            docs = self.retrieval.search_documentation(query, 3)
        except Exception as e:
            logger.error(f"Error handling code help: {e}")
            docs = []

        doc_list = "\n".join(f"- {d.title}: {d.description}" for d in docs)
        return GeneratedResponse(
            message=(
                "I can help you with code-related questions. "
                f"Here are some relevant resources:\n\n{doc_list}\n\n"
                "What specific help do you need?"
            ),
            suggestions=self.CODE_HELP_SUGGESTIONS,
            sources=[d.title for d in docs] or None,
        )

    def _handle_business_analytics(self, query: str) -> GeneratedResponse:
        return GeneratedResponse(
            message=(
                "I can help you analyze business data and generate insights. "
                "What specific metrics or data would you like to analyze?"
            ),
            suggestions=self.ANALYTICS_SUGGESTIONS,
        )

    def _handle_general_question(self, query: str) -> GeneratedResponse:
        try:
            results = self.retrieval.search(query, 5)
        except Exception as e:
            logger.error(f"Error handling general question: {e}")
            results = []

        if not results:
            return GeneratedResponse(
                message=(
                    "I'm here to help! I can assist you with:\n"
                    "- Product information and recommendations\n"
                    "- Category browsing\n"
                    "- Code and API help\n"
                    "- Business insights\n\n"
                    "What would you like to know?"
                ),
                suggestions=self.CAPABILITY_SUGGESTIONS,
            )

        result_list = "\n".join(f"- {r.title} ({r.type.value})" for r in results[:5])
        return GeneratedResponse(
            message=(
                f"I found some relevant information:\n\n{result_list}\n\n"
                "Would you like more details about any of these?"
            ),
            suggestions=[r.title for r in results[:3]],
            sources=[r.title for r in results],
        )

    def _truncate(self, text: str) -> str:
        """Cut text to the display limit, marking the cut."""
        limit = self.settings.max_description_length
        text = text or ""
        if len(text) <= limit:
            return text
        return text[:limit].rstrip() + "..."
