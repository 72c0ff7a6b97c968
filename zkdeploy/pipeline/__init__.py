"""Deployment pipeline: orchestration and the resulting instance registry."""

from zkdeploy.pipeline.orchestrator import DeploymentOrchestrator, instantiate
from zkdeploy.pipeline.registry import InstanceRegistry

__all__ = ["DeploymentOrchestrator", "InstanceRegistry", "instantiate"]
