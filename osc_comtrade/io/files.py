import os
from typing import Optional

from osc_comtrade.core.config import ParserConfig
from osc_comtrade.core.errors import MissingInputError
from osc_comtrade.core.record import Comtrade
from osc_comtrade.io.parser import ComtradeParser

EXT_CFG = "CFG"
EXT_CFF = "CFF"
EXT_DAT = "DAT"
EXT_HDR = "HDR"
EXT_INF = "INF"


def _read_file(path: str) -> bytes:
    with open(path, "rb") as file:
        return file.read()


def _read_companion(path: Optional[str]) -> Optional[bytes]:
    # дополнительные файлы HDR и INF загружаются, только если они существуют
    if path is None or not os.path.exists(path):
        return None
    return _read_file(path)


def _companion_path(basename: str, extension: str, upper_case: bool) -> str:
    """
    Подбирает путь к файлу с тем же именем и другим расширением: сначала в
    том же регистре, что и у CFG, затем в противоположном.
    """
    same = basename + (extension.upper() if upper_case else extension.lower())
    other = basename + (extension.lower() if upper_case else extension.upper())
    if not os.path.exists(same) and os.path.exists(other):
        return other
    return same


def load(path: str, dat_file: Optional[str] = None, hdr_file: Optional[str] = None,
         inf_file: Optional[str] = None, config: Optional[ParserConfig] = None) -> Comtrade:
    """
    Загружает запись COMTRADE с диска.

    path - путь к файлу CFG или CFF, включая расширение. Для CFG пути к
    DAT, HDR и INF по умолчанию выводятся из имени файла CFG.

    Аргументы:
        dat_file: путь к DAT, если его имя отличается от имени CFG.
        hdr_file: необязательный путь к HDR.
        inf_file: необязательный путь к INF.
        config: настройки разбора.
    """
    path = os.fspath(path)
    # какое расширение: CFG или CFF?
    file_ext = path[-3:].upper()
    if file_ext == EXT_CFF:
        return ComtradeParser(cff_file=_read_file(path), config=config).parse()
    if file_ext != EXT_CFG:
        raise MissingInputError(f"Ожидался путь к файлу CFG или CFF, вместо этого получено "
                                f"\"{path}\".")

    basename = path[:-3]
    upper_case = path[-3:].isupper()
    # если не указано, выводим dat_file из cfg_file
    if dat_file is None:
        dat_file = _companion_path(basename, EXT_DAT, upper_case)
    if hdr_file is None:
        hdr_file = _companion_path(basename, EXT_HDR, upper_case)
    if inf_file is None:
        inf_file = _companion_path(basename, EXT_INF, upper_case)

    if not os.path.exists(dat_file):
        raise MissingInputError(f"не найден файл данных \"{dat_file}\"")

    return ComtradeParser(
        cfg_file=_read_file(path),
        dat_file=_read_file(dat_file),
        hdr_file=_read_companion(hdr_file),
        inf_file=_read_companion(inf_file),
        config=config,
    ).parse()
