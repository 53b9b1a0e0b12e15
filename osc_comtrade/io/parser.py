from typing import Optional, Union

from osc_comtrade.core.config import ParserConfig
from osc_comtrade.core.constants import DataFormat
from osc_comtrade.core.errors import MissingInputError, StructuralError
from osc_comtrade.core.record import Comtrade, RecordBuilder
from osc_comtrade.io.cff import CffSections, demultiplex
from osc_comtrade.io.cfg_parser import CfgParser
from osc_comtrade.io.dat_readers import get_dat_reader
from osc_comtrade.io.sources import SourceLike, read_bytes, read_text


class ComtradeParser:
    """
    Разбор записи COMTRADE из открытых потоков или готовых str/bytes.

    Передаётся либо объединённый файл CFF (cff_file), либо пара CFG + DAT
    (cfg_file, dat_file) с необязательными HDR и INF. Проверка комбинации
    выполняется при создании объекта, до чтения данных.

    Пример:
        with open("rec.cfg", "rb") as cfg, open("rec.dat", "rb") as dat:
            record = ComtradeParser(cfg_file=cfg, dat_file=dat).parse()
    """

    def __init__(self, cff_file: Optional[SourceLike] = None,
                 cfg_file: Optional[SourceLike] = None,
                 dat_file: Optional[SourceLike] = None,
                 hdr_file: Optional[SourceLike] = None,
                 inf_file: Optional[SourceLike] = None,
                 config: Optional[ParserConfig] = None):
        if cff_file is not None:
            if any(f is not None for f in (cfg_file, dat_file, hdr_file, inf_file)):
                raise MissingInputError("файл CFF передаётся без отдельных CFG, DAT, HDR и INF")
        elif cfg_file is None or dat_file is None:
            raise MissingInputError("необходимо передать файл CFF или пару файлов CFG и DAT")

        self.cff_file = cff_file
        self.cfg_file = cfg_file
        self.dat_file = dat_file
        self.hdr_file = hdr_file
        self.inf_file = inf_file
        self.config = config or ParserConfig()

    def parse(self) -> Comtrade:
        """Читает источники целиком, разбирает их и возвращает неизменяемую запись."""
        if self.cff_file is not None:
            return self._parse_cff()

        encodings = self.config.encodings
        cfg_text = read_text(self.cfg_file, encodings)
        dat_contents = read_bytes(self.dat_file)
        hdr_text = self._read_optional(self.hdr_file)
        inf_text = self._read_optional(self.inf_file)
        return self._assemble(cfg_text, dat_contents, hdr_text, inf_text)

    def _parse_cff(self) -> Comtrade:
        sections = demultiplex(self.cff_file, self.config)
        return self._assemble(sections.cfg, sections.dat, sections.hdr, sections.inf,
                              sections)

    def _read_optional(self, source: Optional[SourceLike]) -> Optional[str]:
        if source is None:
            return None
        text = read_text(source, self.config.encodings)
        return text if len(text) > 0 else None

    def _assemble(self, cfg_text: str, dat_contents: Union[str, bytes],
                  hdr_text: Optional[str], inf_text: Optional[str],
                  sections: Optional[CffSections] = None) -> Comtrade:
        builder = CfgParser(self.config).parse(cfg_text, RecordBuilder())
        if sections is not None:
            self._check_cff_format(builder, sections)

        dat = get_dat_reader(builder, self.config)
        dat.read(dat_contents)
        dat.store(builder)

        builder.header_text = hdr_text or None
        builder.info_text = inf_text or None
        return builder.build()

    @staticmethod
    def _check_cff_format(builder: RecordBuilder, sections: CffSections) -> None:
        """Формат в заголовке раздела DAT должен совпадать с форматом из CFG."""
        declared = sections.data_format
        if declared is not None and declared is not builder.data_format:
            raise StructuralError(
                f"формат раздела DAT ({declared.value}) не совпадает с форматом "
                f"в CFG ({builder.data_format.value})")
        if isinstance(sections.dat, str) and builder.data_format is not DataFormat.ASCII:
            raise StructuralError("двоичные данные в разделе DAT прочитаны как текст")


def parse(cff_file: Optional[SourceLike] = None, cfg_file: Optional[SourceLike] = None,
          dat_file: Optional[SourceLike] = None, hdr_file: Optional[SourceLike] = None,
          inf_file: Optional[SourceLike] = None,
          config: Optional[ParserConfig] = None) -> Comtrade:
    """Сокращение для ComtradeParser(...).parse()."""
    return ComtradeParser(cff_file, cfg_file, dat_file, hdr_file, inf_file, config).parse()
