"""AI commands. They need an :class:`AIEnhancer`; without one they report unavailability."""

from __future__ import annotations

from simterm.kernel.exceptions import AIServiceError, UsageError
from simterm.kernel.logging import get_logger
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup
from simterm.stdlib.lib.syntax_highlighter import language_for_filename, resolve_language

logger = get_logger(__name__)

group = CommandGroup(CommandCategory.AI)

UNAVAILABLE = "AI service unavailable"

DEFAULT_SUGGESTIONS = (
    "Consider using modern JavaScript features",
    "Add error handling",
    "Optimize performance",
    "Add unit tests",
)


def _bullets(title: str, items: list[str] | tuple[str, ...]) -> str:
    return "\n".join([title, *(f"• {item}" for item in items)])


@group.command(
    "ai",
    description="Ask the AI assistant",
    usage="ai <query>",
    examples=("ai how do I run the tests",),
)
async def ai(ctx: CommandContext) -> None:
    query = " ".join(ctx.args)
    if not query:
        raise UsageError(ctx.usage)
    if ctx.ai is None:
        ctx.error(UNAVAILABLE)
        return
    try:
        suggestions = await ctx.ai.asuggest(query)
    except AIServiceError as e:
        logger.warning("AI query failed: {error}", error=e)
        ctx.error(UNAVAILABLE)
        return
    ctx.success(f"AI Response: {', '.join(suggestions) if suggestions else 'No suggestions'}")


@group.command(
    "enhance",
    description="Enhance code with AI",
    usage="enhance <file|code> [language]",
    examples=("enhance src/index.js", "enhance 'var x = 1' javascript"),
)
async def enhance(ctx: CommandContext) -> None:
    target = ctx.arg(0)
    entry = ctx.vfs.get(ctx.resolve(target))
    if entry is not None and entry.is_file:
        code = entry.content or ""
        language = language_for_filename(entry.name)
    else:
        code = target
        language = None
    if len(ctx.args) > 1:
        language = resolve_language(ctx.args[1]) or ctx.args[1]
    language = language or ctx.highlighter.detect_language(code)

    if ctx.ai is None:
        ctx.error(UNAVAILABLE)
        return
    try:
        enhanced = await ctx.ai.aenhance(code, language)
    except AIServiceError as e:
        logger.warning("AI enhancement failed for {language}: {error}", language=language, error=e)
        ctx.error("AI enhancement failed")
        return
    ctx.success(f"Enhanced Code:\n{enhanced}", language=language)


@group.command(
    "suggest",
    description="Get AI suggestions",
    usage="suggest [prompt]",
    examples=("suggest", "suggest build and test"),
)
async def suggest(ctx: CommandContext) -> None:
    prompt = " ".join(ctx.args)
    if not prompt or ctx.ai is None:
        ctx.info(_bullets("AI Suggestions:", DEFAULT_SUGGESTIONS))
        return
    try:
        suggestions = await ctx.ai.asuggest(prompt)
    except AIServiceError as e:
        logger.warning("AI suggestion failed: {error}", error=e)
        ctx.info(_bullets("AI Suggestions:", DEFAULT_SUGGESTIONS))
        return
    ctx.info(_bullets("AI Suggestions:", suggestions or DEFAULT_SUGGESTIONS))


__all__ = ["DEFAULT_SUGGESTIONS", "group"]
