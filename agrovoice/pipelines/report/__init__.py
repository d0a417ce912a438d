"""Report generation pipeline.

Modules follow the order in which ``POST /reports/generate`` executes:

1. `types` – validate the request and expose the few fields we label with.
2. `prompts` – render the agronomist system/user prompts.
3. `generator` – call the JSON-mode report model and parse its reply.
4. `assembler` – merge the parsed reply with request context into a Report.
"""

from .assembler import ReportAssembler, classify_status
from .generator import ReportGenerator, extract_json
from .prompts import AGRONOMIST_SYSTEM_PROMPT, build_report_prompt
from .types import REQUIRED_FIELDS, ReportRequest

__all__ = [
    "AGRONOMIST_SYSTEM_PROMPT",
    "REQUIRED_FIELDS",
    "ReportAssembler",
    "ReportGenerator",
    "ReportRequest",
    "build_report_prompt",
    "classify_status",
    "extract_json",
]
