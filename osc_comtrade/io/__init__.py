from .cff import CffSections, demultiplex, match_cff_header
from .cfg_parser import CfgParser
from .dat_readers import get_dat_reader
from .files import load
from .parser import ComtradeParser, parse
from .time_offset import parse_time_offset
