"""Entry point for `python -m kubelineage`.

Usage:
    python -m kubelineage --file batch.json orphans
    kubectl get all -A -o json | python -m kubelineage export --format mermaid
"""

from __future__ import annotations

from kubelineage.cli import cli

cli(prog_name="kubelineage")
