"""
TM seeding from exported files
Reads TMX and CSV exports into TMEntry rows for a language pair
"""

import io
import codecs
import re
import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

import pandas as pd

from models.entities import TMEntry
import config

logger = logging.getLogger(__name__)

XML_LANG = '{http://www.w3.org/XML/1998/namespace}lang'


def parse_tmx(content: bytes) -> List[Dict[str, str]]:
    """
    Parse TMX translation units

    Returns:
        One dict per <tu>: {language_code (lowercase): segment text}
    """
    root = None
    for enc in ['utf-16', 'utf-8-sig', 'utf-8', 'latin-1']:
        try:
            xml_str = content.decode(enc)
            xml_str = re.sub(r'<\?xml.*encoding=["\'].*["\'].*\?>', '', xml_str, count=1)
            root = ET.fromstring(xml_str)
            break
        except (ValueError, ET.ParseError):
            continue
    if root is None:
        logger.warning("TMX content could not be decoded")
        return []

    units = []
    for tu in root.iter('tu'):
        tuvs = tu.findall('tuv')
        if len(tuvs) < 2:
            continue
        unit = {}
        for tuv in tuvs:
            lang = tuv.get(XML_LANG) or tuv.get('lang')
            seg = tuv.find('seg')
            if lang and seg is not None:
                unit[lang.lower()] = "".join(seg.itertext()).strip()
        units.append(unit)
    return units


def _find_lang_key(unit: Dict[str, str], lang: str) -> Optional[str]:
    short = lang.split('-')[0].lower()
    return next((k for k in unit if k.split('-')[0] == short), None)


def load_tmx(content: bytes,
             src_lang: str,
             tgt_lang: str,
             therapeutic_area: Optional[str] = None,
             project_id: Optional[str] = None) -> List[TMEntry]:
    """TM entries for one language pair from a TMX export"""
    entries = []
    for unit in parse_tmx(content):
        s_key = _find_lang_key(unit, src_lang)
        t_key = _find_lang_key(unit, tgt_lang)
        if not s_key or not t_key or not unit[s_key]:
            continue

        entries.append(TMEntry(
            source_text=unit[s_key],
            target_text=unit[t_key],
            source_language=src_lang,
            target_language=tgt_lang,
            match_score=config.DEFAULT_MATCH_SCORE,
            quality_score=config.DEFAULT_QUALITY_SCORE,
            confidence_level=config.DEFAULT_CONFIDENCE_LEVEL,
            therapeutic_area=therapeutic_area,
            project_id=project_id,
        ))

    logger.info(f"Loaded {len(entries)} TM entries from TMX ({src_lang}→{tgt_lang})")
    return entries


def read_csv_export(content: bytes) -> pd.DataFrame:
    """Read a CSV export, trying common encodings"""
    encodings = ['utf-8-sig', 'utf-8', 'cp1252', 'latin-1']
    # UTF-16 only with a BOM; latin-1 never fails, keep it last
    if content[:2] in (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE):
        encodings.insert(0, 'utf-16')

    for encoding in encodings:
        try:
            df = pd.read_csv(io.BytesIO(content), encoding=encoding)
            break
        except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError):
            continue
    else:
        return pd.DataFrame()

    return df.fillna('')


def load_csv(content: bytes,
             src_lang: str,
             tgt_lang: str,
             therapeutic_area: Optional[str] = None,
             project_id: Optional[str] = None) -> List[TMEntry]:
    """
    TM entries from a CSV export

    Uses 'source'/'target' columns when present, otherwise the first two
    columns. Optional 'quality_score' and 'therapeutic_area' columns
    override the defaults per row.
    """
    df = read_csv_export(content)
    if df.empty or len(df.columns) < 2:
        return []

    columns = {str(c).lower().strip(): c for c in df.columns}
    src_col = columns.get('source', df.columns[0])
    tgt_col = columns.get('target', df.columns[1])
    quality_col = columns.get('quality_score')
    area_col = columns.get('therapeutic_area')

    entries = []
    for _, row in df.iterrows():
        source = str(row[src_col]).strip()
        target = str(row[tgt_col]).strip()
        if not source or not target:
            continue

        quality = config.DEFAULT_QUALITY_SCORE
        if quality_col and str(row[quality_col]).strip():
            try:
                quality = float(row[quality_col])
            except ValueError:
                logger.warning(f"Invalid quality score {row[quality_col]!r}, using default")

        area = therapeutic_area
        if area_col and str(row[area_col]).strip():
            area = str(row[area_col]).strip()

        entries.append(TMEntry(
            source_text=source,
            target_text=target,
            source_language=src_lang,
            target_language=tgt_lang,
            match_score=config.DEFAULT_MATCH_SCORE,
            quality_score=quality,
            confidence_level=config.DEFAULT_CONFIDENCE_LEVEL,
            therapeutic_area=area,
            project_id=project_id,
        ))

    logger.info(f"Loaded {len(entries)} TM entries from CSV ({src_lang}→{tgt_lang})")
    return entries
