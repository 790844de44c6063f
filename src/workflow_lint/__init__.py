"""
workflow-lint Package.

A static analyzer for Go programs built on durable-workflow frameworks
(Cadence, Temporal). It reports nondeterministic operations (wall-clock
time, randomness, I/O, native goroutines and channels, unvetted third-party
calls) in workflow code and in every helper a workflow can reach, while
leaving activities alone.

Usage
-----

.. code-block:: python

    from workflow_lint import RuntimeConfig, Scanner, load_rules

    scanner = Scanner(RuntimeConfig(), load_rules())
    result = scanner.scan("path/to/service")
    for issue in result.issues:
        print(issue.file, issue.line, issue.rule, issue.message)
"""

from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.config import RuntimeConfig
from workflow_lint.models import Issue, ScanResult
from workflow_lint.rules import RuleSet, load_rules
from workflow_lint.scanner import Scanner

__version__ = "0.1.0"

__all__ = [
  "Issue",
  "RuleSet",
  "RuntimeConfig",
  "ScanResult",
  "Scanner",
  "WorkflowRegistry",
  "__version__",
  "load_rules",
]
