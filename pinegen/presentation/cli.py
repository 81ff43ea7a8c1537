import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from openai import OpenAIError

from pinegen.config.settings import settings
from pinegen.container import configure_container, container
from pinegen.core.services.chat_service import ChatService
from pinegen.core.services.code_normalizer import CodeNormalizer
from pinegen.core.services.config_parser import parse_indicator_config
from pinegen.core.services.indicator_service import IndicatorService
from pinegen.core.services.prompt_builder import AgentMode
from pinegen.core.services.reference_matcher import ReferenceMatcher
from pinegen.core.services.template_library import TemplateLibrary, TemplateLibraryError
from pinegen.infrastructure.llm.openai_provider import AI_MODEL_LIST, ProviderConfigError

logger = logging.getLogger(__name__)


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_templates(args: argparse.Namespace) -> int:
    """List library templates."""
    library = container.resolve(TemplateLibrary)
    for template in library:
        print(f"{template.id:<28} {template.name}  [{', '.join(template.categories)}]")
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Show the reference match for a prompt."""
    matcher = container.resolve(ReferenceMatcher)
    _print_json(matcher.match(args.prompt).to_dict())
    return 0


def cmd_prompt(args: argparse.Namespace) -> int:
    """Print the augmented generation prompt without calling the model."""
    service = container.resolve(IndicatorService)
    match, prompt = service.prepare(args.prompt)
    if match.best_match:
        logger.info(f"Reference: {match.best_match.name} ({match.score:.3f})")
    else:
        logger.info("No reference match, using search prompt")
    print(prompt)
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize saved model output from a file or stdin."""
    if args.file == "-":
        raw_text = sys.stdin.read()
    else:
        raw_text = Path(args.file).read_text(encoding="utf-8")

    output = container.resolve(CodeNormalizer).normalize(raw_text)
    config = parse_indicator_config(output.primary_code) if output.primary_code else None
    _print_json(
        {
            "code": output.primary_code,
            "previewCode": output.preview_code,
            "config": config.to_dict() if config else None,
        }
    )
    return 0 if output.primary_code else 2


def cmd_generate(args: argparse.Namespace) -> int:
    """Run the full generation pipeline."""
    service = container.resolve(IndicatorService)
    result = asyncio.run(service.generate(args.prompt, model=args.model))
    _print_json(result.to_dict())
    return 0 if result.code else 2


async def _chat_loop(mode: str, model: str | None) -> None:
    service = container.resolve(ChatService)
    history = service.new_history()
    print(f"Chat mode: {mode}. Empty line to quit.")

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            break

        async for token in service.stream_reply(line, history, mode=mode, model=model):
            print(token, end="", flush=True)
        print()


def cmd_chat(args: argparse.Namespace) -> int:
    """Interactive chat in an agent mode."""
    asyncio.run(_chat_loop(args.mode, args.model))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pinegen", description="PineScript indicator generator")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("templates", help="list library templates").set_defaults(func=cmd_templates)

    p = sub.add_parser("match", help="match a prompt against the library")
    p.add_argument("prompt")
    p.set_defaults(func=cmd_match)

    p = sub.add_parser("prompt", help="print the augmented prompt")
    p.add_argument("prompt")
    p.set_defaults(func=cmd_prompt)

    p = sub.add_parser("normalize", help="clean raw model output (file or '-')")
    p.add_argument("file")
    p.set_defaults(func=cmd_normalize)

    p = sub.add_parser("generate", help="generate an indicator")
    p.add_argument("prompt")
    p.add_argument("--model", choices=AI_MODEL_LIST, default=None)
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("chat", help="interactive agent chat")
    p.add_argument("--mode", choices=[m.value for m in AgentMode], default=AgentMode.COACH.value)
    p.add_argument("--model", choices=AI_MODEL_LIST, default=None)
    p.set_defaults(func=cmd_chat)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(level=settings.log_level.upper(), format="%(message)s")
    args = build_parser().parse_args(argv)

    configure_container(settings)

    try:
        return args.func(args)
    except (ValueError, TemplateLibraryError, ProviderConfigError, OpenAIError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
