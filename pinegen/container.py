import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings, target: Container | None = None) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.
        target: Container to fill (module-level container by default).

    Returns:
        Configured container.
    """
    from .core.protocols.llm import LLMProtocol
    from .core.services.chat_service import ChatService
    from .core.services.code_normalizer import CodeNormalizer
    from .core.services.indicator_service import IndicatorService
    from .core.services.reference_matcher import ReferenceMatcher
    from .core.services.template_library import TemplateLibrary
    from .infrastructure.llm.openai_provider import OpenAIProvider, resolve_default_model

    c = target if target is not None else container
    default_model = resolve_default_model(settings.ai_model)

    c.register(
        TemplateLibrary,
        lambda: TemplateLibrary.load(
            settings.templates_path, settings.templates_config_path
        ),
        singleton=True,
    )

    c.register(
        ReferenceMatcher,
        lambda: ReferenceMatcher(c.resolve(TemplateLibrary)),
        singleton=True,
    )

    c.register(CodeNormalizer, CodeNormalizer, singleton=True)

    c.register(
        LLMProtocol,
        lambda: OpenAIProvider(
            openai_api_key=settings.openai_api_key,
            deepseek_api_key=settings.deepseek_api_key,
            default_model=default_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    c.register(
        IndicatorService,
        lambda: IndicatorService(
            llm=c.resolve(LLMProtocol),
            matcher=c.resolve(ReferenceMatcher),
            normalizer=c.resolve(CodeNormalizer),
            default_model=default_model,
        ),
        singleton=True,
    )

    c.register(
        ChatService,
        lambda: ChatService(
            llm=c.resolve(LLMProtocol),
            history_limit=settings.chat_history_limit,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return c
