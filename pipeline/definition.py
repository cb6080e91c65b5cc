"""
Azure DevOps pipeline definition - maps the local command sequence onto
hosted pipeline stages.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import PipelineSettings

logger = logging.getLogger(__name__)


class AzurePipelineDefinition:
    """Builds azure-pipelines.yml from pipeline settings."""

    def __init__(self, settings: PipelineSettings):
        self.settings = settings

    def validate(self) -> bool:
        """Check the settings can produce a usable definition."""
        if not self.settings.trigger_branches:
            logger.error("No trigger branches configured")
            return False
        if not self.settings.connector_name or not self.settings.subgraph:
            logger.error("Connector and subgraph names are required")
            return False
        if not self.settings.variable_group:
            logger.error("No variable group configured")
            return False
        return True

    def _env_mapping(self) -> Dict[str, str]:
        # Secret variables are not exposed to scripts unless mapped explicitly
        names = [*self.settings.required_env_vars, *self.settings.recommended_env_vars]
        return {name: f"$({name})" for name in dict.fromkeys(names)}

    def _install_steps(self) -> List[Dict[str, Any]]:
        return [
            {
                "script": f"curl -L {self.settings.ddn_install_url} | bash",
                "displayName": "Install DDN CLI",
            },
            {
                "script": "ddn auth print-access-token > /dev/null",
                "displayName": "Verify DDN authentication",
                "env": self._env_mapping(),
            },
        ]

    def build(self) -> Dict[str, Any]:
        s = self.settings
        env = self._env_mapping()

        introspect_steps = self._install_steps() + [
            {
                "script": f"ddn connector introspect {s.connector_name} --connector-dir {s.connector_dir}",
                "displayName": "Introspect connector",
                "env": env,
            },
            {
                "script": f"ddn connector-link update {s.connector_name} --subgraph {s.subgraph} --add-all-resources",
                "displayName": "Add connector resources to metadata",
                "env": env,
                "continueOnError": True,
            },
        ]

        copy_lines = [f"mkdir -p {s.build_dir}"]
        for relative in s.metadata_dirs:
            copy_lines.append(f"if [ -d {relative} ]; then cp -r {relative}/* {s.build_dir}/ || true; fi")

        build_steps = self._install_steps() + [
            {
                "script": (
                    f"ddn supergraph build create --supergraph {s.supergraph_file} "
                    '--description "Pipeline build $(Build.BuildNumber)"'
                ),
                "displayName": "Build supergraph",
                "env": env,
            },
            {
                "script": "\n".join(copy_lines) + "\n",
                "displayName": "Generate build artifacts",
            },
            {
                "task": "PublishPipelineArtifact@1",
                "displayName": "Publish build artifacts",
                "inputs": {
                    "targetPath": s.build_dir,
                    "artifact": "supergraph-build",
                },
            },
        ]

        return {
            "trigger": {
                "branches": {"include": list(s.trigger_branches)},
                "paths": {"include": [f"{s.subgraph}/**", "globals/**", s.supergraph_file]},
            },
            "pool": {"vmImage": s.vm_image},
            "variables": [{"group": s.variable_group}],
            "stages": [
                {
                    "stage": "Introspect",
                    "displayName": "Connector introspection",
                    "jobs": [{"job": "Introspect", "steps": [{"checkout": "self"}] + introspect_steps}],
                },
                {
                    "stage": "Build",
                    "displayName": "Supergraph build",
                    "dependsOn": "Introspect",
                    "jobs": [{"job": "Build", "steps": [{"checkout": "self"}] + build_steps}],
                },
            ],
        }

    def generate_config(self, output_path: str) -> None:
        """Write the pipeline definition as YAML."""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w') as f:
            yaml.dump(self.build(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Generated pipeline definition: {output_file}")
