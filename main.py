import argparse
import asyncio
import os
import sys

from sitesmith.domain import SiteBrief, RunStatus
from sitesmith.errors import BriefError, ExportError, GatewayError
from sitesmith.llm import OllamaGateway, OpenAICompatibleGateway
from sitesmith.mocks import MockModelGateway
from sitesmith.pipeline.artifacts import ZipExportPackager
from sitesmith.pipeline.config import PipelineConfig, RetryPolicy
from sitesmith.pipeline.orchestrator import GenerationOrchestrator
from sitesmith.utils import slugify


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="sitesmith - generate a small static website with a local LLM")
    parser.add_argument("--topic", type=str, help="Website brief, e.g. 'artisan bakery in Lisbon'")
    parser.add_argument("--pages", type=int, default=3, help="Number of pages to generate")
    parser.add_argument("--model", type=str, default=None, help="Model identifier (required unless --mock)")
    parser.add_argument("--preamble", type=str, default="", help="System preamble prepended to every prompt")
    parser.add_argument("--backend", choices=["ollama", "openai"], default="ollama", help="Model service flavour")
    parser.add_argument("--host", type=str, default=None,
                        help="Ollama host or OpenAI-compatible base URL (default: $OLLAMA_HOST)")
    parser.add_argument("--api-key", type=str, default=os.environ.get("OPENAI_API_KEY", "EMPTY"),
                        help="API key for the openai backend")
    parser.add_argument("--output", type=str, default="output", help="Directory for the exported zip")
    parser.add_argument("--base-url", type=str, default=None, help="Public URL used in sitemap.xml and robots.txt")
    parser.add_argument("--max-fix-attempts", type=int, default=None, help="Structural fix attempts per page")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds (0 disables)")
    parser.add_argument("--list-models", action="store_true", help="List available models and exit")
    parser.add_argument("--mock", action="store_true", help="Use the offline mock model")
    parser.add_argument("--quiet", action="store_true", help="Hide debug output")
    return parser


def build_config(args) -> PipelineConfig:
    config = PipelineConfig.from_env()
    if args.max_fix_attempts is not None:
        config.retry = RetryPolicy(max_fix_attempts=args.max_fix_attempts)
    if args.timeout is not None:
        config.call_timeout = args.timeout if args.timeout > 0 else None
    if args.base_url:
        config.site_base_url = args.base_url.rstrip("/")
    if args.host and args.backend == "ollama":
        config.ollama_host = args.host.rstrip("/")
    config.verbose = not args.quiet
    return config


def build_gateway(args, config: PipelineConfig):
    if args.mock:
        return MockModelGateway()
    if args.backend == "openai":
        return OpenAICompatibleGateway(base_url=args.host or "http://127.0.0.1:8000/v1", api_key=args.api_key)
    return OllamaGateway(host=config.ollama_host)


async def run(args) -> int:
    config = build_config(args)
    gateway = build_gateway(args, config)
    try:
        if args.list_models:
            for name in await gateway.list_models():
                print(name)
            return 0

        brief = SiteBrief(
            topic=args.topic or "",
            page_count=args.pages,
            model_id=args.model or ("mock-model" if args.mock else ""),
            system_preamble=args.preamble,
        )
        orchestrator = GenerationOrchestrator(gateway, config)
        print(f"🚀 Generating '{brief.topic}' ({brief.page_count} page(s)) with {brief.model_id}...")
        result = await orchestrator.run_generation(brief)
    except BriefError as e:
        print(f"❌ Invalid brief: {e}")
        return 2
    except GatewayError as e:
        print(f"❌ Model service error: {e}")
        return 1
    finally:
        await gateway.aclose()

    if result.status == RunStatus.FAILED:
        print(f"\n❌ Generation failed: {result.error}")
        return 1
    if result.status == RunStatus.CANCELLED:
        print(f"\n⏹  Generation stopped: {result.cancel_reason}")
        return 130

    site_title = result.plan.site_title if result.plan else brief.topic
    try:
        path = ZipExportPackager(args.output).package(slugify(site_title), result.export_files)
        print(f"\n📦 Export written to {path}")
    except ExportError as e:
        # Pages are still in the result; only the archive is missing.
        print(f"\n⚠️ Export failed: {e}")

    for page in result.pages:
        status = "✅" if page.valid else "⚠️"
        print(f"{status} {page.filename}")
        for issue in page.issues:
            print(f"     - {issue}")
    return 0 if result.all_valid else 3


def main():
    args = build_parser().parse_args()
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\n⏹  Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
