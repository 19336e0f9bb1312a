"""Layout-descriptor evaluation and report writing."""

from .directives import DirectiveError as DirectiveError
from .directives import parse_directive as parse_directive
from .driver import UnknownVersionError as UnknownVersionError
from .driver import run_report as run_report
from .driver import write_report as write_report
from .flags import evaluate_flag_array as evaluate_flag_array
from .formatting import ReportWriter as ReportWriter
from .formatting import format_flag_value as format_flag_value
from .formatting import format_hex as format_hex
from .script import FatalError as FatalError
from .script import ScriptElement as ScriptElement
from .script import ScriptError as ScriptError
from .script import load_script as load_script
from .script import parse_script as parse_script
from .section import ResolutionContext as ResolutionContext
from .section import ResolutionError as ResolutionError
from .section import evaluate_section as evaluate_section
