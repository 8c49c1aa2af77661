#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Vibe Writer CLI - run the writing pipeline from the command line

Usage:
    python vibe_write.py write --file notes.md -o article.md
    python vibe_write.py write --url https://example.com/post --provider deepseek
    python vibe_write.py review article.md --step style
    python vibe_write.py revise article.md -i "Make the intro shorter"
    python vibe_write.py format article.md
    python vibe_write.py keys set openai sk-...
    python vibe_write.py keys list

Stages run in-process by default; pass --server to go through a running
API server instead (python -m api.main).
"""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import Optional

# Add project directory to path
sys.path.insert(0, str(Path(__file__).parent))

from ai_providers import AIProviderError, AIProviderType, ProviderDispatcher
from config.settings import settings
from core.credentials import CredentialStore, InMemoryCredentialStore, JsonCredentialStore, mask_key
from core.errors import PipelineError
from core.models import ArticleType, Audience, ReviewStep, WritingConfig, WritingStyle
from core.pipeline import (
    HttpStageTransport,
    InstructionStatus,
    LocalStageTransport,
    StagePipelineController,
    WritingSession,
)
from core.pipeline.state import PipelineStage
from core.post_formatting import format_markdown_layout
from core.url_fetcher import UrlFetcher, read_uploaded_text

STAGE_LABELS = {
    PipelineStage.GENERATING: "Writing draft",
    PipelineStage.REVIEWING_CONTENT: "Reviewing content",
    PipelineStage.REVIEWING_STYLE: "Reviewing style",
    PipelineStage.REVIEWING_DETAIL: "Reviewing details",
    PipelineStage.REVISING: "Revising",
}

STATUS_ICONS = {
    InstructionStatus.APPLIED: "✅",
    InstructionStatus.PENDING: "⏳",
    InstructionStatus.FAILED: "❌",
}


class ProgressPrinter:
    """Reports stage changes on stderr; echoes the draft as it streams"""

    def __init__(self, echo: bool = True):
        self.echo = echo
        self._stage: Optional[PipelineStage] = None
        self._shown = 0

    def __call__(self, session: WritingSession) -> None:
        if session.stage != self._stage:
            if self._shown:
                sys.stderr.write("\n")
            self._stage = session.stage
            self._shown = 0
            if session.stage is not None:
                sys.stderr.write(f"⏳ {STAGE_LABELS[session.stage]}...\n")
            sys.stderr.flush()
            return

        if not self.echo or session.stage is not PipelineStage.GENERATING:
            return
        delta = session.article[self._shown:]
        if delta:
            sys.stderr.write(delta)
            sys.stderr.flush()
            self._shown = len(session.article)


def build_credentials(args) -> CredentialStore:
    if getattr(args, "api_key", None):
        return InMemoryCredentialStore({args.provider: args.api_key})
    return JsonCredentialStore(settings.credentials_file)


def build_transport(args):
    if getattr(args, "server", None):
        return HttpStageTransport(args.server, timeout=settings.stream_timeout_seconds)
    return LocalStageTransport()


def build_controller(args, session: WritingSession) -> StagePipelineController:
    return StagePipelineController(
        session,
        build_transport(args),
        build_credentials(args),
        on_update=ProgressPrinter(echo=not args.quiet),
    )


def build_session(args, **fields) -> WritingSession:
    session = WritingSession(provider=AIProviderType(args.provider), **fields)
    if args.model:
        session.model_id = args.model
    return session


def write_output(text: str, output: Optional[str]) -> None:
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        print(f"✅ Saved to {path}", file=sys.stderr)
    else:
        print(text)


async def load_source(args) -> str:
    if args.url:
        fetcher = UrlFetcher(timeout=settings.fetch_timeout_seconds, user_agent=settings.fetch_user_agent)
        return await fetcher.fetch(args.url)
    if args.file:
        path = Path(args.file)
        return read_uploaded_text(path.name, path.read_bytes(), settings.max_upload_bytes)
    return args.text


def cmd_write(args):
    """Generate an article and run the three review passes"""
    async def run():
        source = await load_source(args)
        config = WritingConfig(
            article_type=ArticleType(args.article_type),
            audience=Audience(args.audience),
            style=WritingStyle(args.style),
            word_count=args.word_count,
            extra_instructions=args.extra or "",
        )
        session = build_session(args, source_content=source, config=config)
        return await build_controller(args, session).run_pipeline()

    article = asyncio.run(run())
    write_output(article, args.output)
    return 0


def cmd_review(args):
    """Run one review pass over an article file"""
    path = Path(args.article)
    session = build_session(args, article=path.read_text(encoding="utf-8"))
    article = asyncio.run(build_controller(args, session).review(ReviewStep(args.step)))
    write_output(article, args.output or str(path))
    return 0


def cmd_revise(args):
    """Apply instructions to an article file, one after another"""
    path = Path(args.article)
    session = build_session(args, article=path.read_text(encoding="utf-8"))
    controller = build_controller(args, session)

    async def run():
        applied = False
        for instruction in args.instruction:
            record = await controller.revise(instruction)
            print(f"{STATUS_ICONS[record.status]} {record.instruction}: {record.message}", file=sys.stderr)
            if record.status == InstructionStatus.FAILED:
                return applied, False
            applied = applied or record.status == InstructionStatus.APPLIED
        return applied, True

    applied, ok = asyncio.run(run())
    if applied:
        write_output(session.article, args.output or str(path))
    return 0 if ok else 1


def cmd_format(args):
    """Normalize the markdown layout of a file"""
    path = Path(args.article)
    formatted = format_markdown_layout(path.read_text(encoding="utf-8"))
    write_output(formatted, args.output or (None if args.stdout else str(path)))
    return 0


def cmd_keys(args):
    """Manage stored API keys"""
    store = JsonCredentialStore(settings.credentials_file)

    if args.keys_command == "set":
        store.set(AIProviderType(args.provider), args.key)
        print(f"✅ Key for {args.provider} {'saved' if args.key.strip() else 'removed'}")
        return 0

    keys = store.load_all()
    print("\n🔑 API KEYS")
    print("=" * 50)
    for info in ProviderDispatcher.list_providers():
        key = keys.get(info.type.value)
        shown = mask_key(key) if key else "-"
        print(f"   {info.type.value:<10} {shown:<16} {info.name}")
    print("=" * 50)
    return 0


def add_model_options(parser: argparse.ArgumentParser) -> None:
    providers = [p.value for p in AIProviderType]
    parser.add_argument('--provider', '-p', default=settings.default_provider, choices=providers,
                        help=f'AI provider (default: {settings.default_provider})')
    parser.add_argument('--model', '-m', help="Model id (default: the provider's default model)")
    parser.add_argument('--api-key', help='Use this key instead of the stored one')
    parser.add_argument('--server', nargs='?', const=settings.server_url,
                        help=f'Run stages on an API server (default URL: {settings.server_url})')
    parser.add_argument('--output', '-o', help='Output file')
    parser.add_argument('--quiet', '-q', action='store_true', help='Do not echo the draft while it streams')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Vibe Writer - AI article pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Write command
    write_parser = subparsers.add_parser('write', help='Write an article from source material')
    source = write_parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--file', '-f', help='Source file (.txt, .md, .markdown)')
    source.add_argument('--url', '-u', help='Source web page')
    source.add_argument('--text', '-t', help='Source text')
    write_parser.add_argument('--article-type', default=ArticleType.WECHAT.value,
                              choices=[t.value for t in ArticleType], help='Article format')
    write_parser.add_argument('--audience', default=Audience.GENERAL.value,
                              choices=[a.value for a in Audience], help='Target audience')
    write_parser.add_argument('--style', default=WritingStyle.CASUAL.value,
                              choices=[s.value for s in WritingStyle], help='Writing style')
    write_parser.add_argument('--word-count', default=WritingConfig().word_count, help='Target length, e.g. 2000-4000')
    write_parser.add_argument('--extra', help='Extra instructions for the writer')
    add_model_options(write_parser)

    # Review command
    review_parser = subparsers.add_parser('review', help='Run one review pass on an article')
    review_parser.add_argument('article', help='Article file (rewritten in place unless -o)')
    review_parser.add_argument('--step', '-s', default=ReviewStep.CONTENT.value,
                               choices=[s.value for s in ReviewStep], help='Review pass')
    add_model_options(review_parser)

    # Revise command
    revise_parser = subparsers.add_parser('revise', help='Revise an article by instruction')
    revise_parser.add_argument('article', help='Article file (rewritten in place unless -o)')
    revise_parser.add_argument('--instruction', '-i', action='append', required=True,
                               help='Revision instruction (repeat for several)')
    add_model_options(revise_parser)

    # Format command
    format_parser = subparsers.add_parser('format', help='Normalize markdown layout')
    format_parser.add_argument('article', help='Article file (rewritten in place unless -o)')
    format_parser.add_argument('--output', '-o', help='Output file')
    format_parser.add_argument('--stdout', action='store_true', help='Print instead of rewriting the file')

    # Keys command
    keys_parser = subparsers.add_parser('keys', help='Manage stored API keys')
    keys_sub = keys_parser.add_subparsers(dest='keys_command', required=True)
    set_parser = keys_sub.add_parser('set', help='Store (or with "" remove) a key')
    set_parser.add_argument('provider', choices=[p.value for p in AIProviderType])
    set_parser.add_argument('key', help='API key')
    keys_sub.add_parser('list', help='Show stored keys (masked)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Route to command handlers
    commands = {
        'write': cmd_write,
        'review': cmd_review,
        'revise': cmd_revise,
        'format': cmd_format,
        'keys': cmd_keys,
    }

    handler = commands.get(args.command)
    try:
        return handler(args)
    except (PipelineError, AIProviderError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Stopped by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
