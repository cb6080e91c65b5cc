#!/usr/bin/env python3
"""
Generate azure-pipelines.yml from the pipeline settings.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pipeline.definition import AzurePipelineDefinition
from pipeline.settings import load_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate the Azure DevOps pipeline definition")
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path("."),
        help="DDN project directory (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional YAML/JSON settings file",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output file (default: <project-root>/azure-pipelines.yml)",
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ Could not load settings: {e}")
        return 1

    definition = AzurePipelineDefinition(settings)
    if not definition.validate():
        logger.error("❌ Invalid pipeline settings")
        return 1

    output_path = args.output or args.project_root / settings.pipeline_file
    definition.generate_config(str(output_path))
    logger.info(f"✅ Generated {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
