"""
Priority Matrix: Data Loader
Reads the per-person evaluation export (JSON, or an Excel sheet with one row
per evaluation) plus the optional parameters workbook, and freezes the result
into an EvaluationStore. Load problems never raise: they yield an empty store
and a reason the dashboard can show.
"""
import os, json, math, logging
from dataclasses import dataclass
from typing import Optional

import openpyxl

from engines.models import DEFAULT_WEIGHTS, Evaluation, EvaluationStore

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data')
DEFAULT_DATA_FILE = 'output.json'

# ── Macro area palette (chart dots, filter legend, table chips) ──
MACRO_AREA_COLORS = {
    'Discovery & Education': '#e63946',
    'Personalization & Advisory': '#f77f00',
    'Wine Investment & Financial Tools': '#fcbf49',
    'Provenance, Certification & Trust': '#2a9d8f',
    'Gamification & Social Sharing': '#1d3557',
    'Digital Cellar & Collection Management': '#6a4c93',
    'Logistics, Delivery & Post-Purchase Care': '#8d6e63',
    'Consumption Support & Experience': '#00b4d8',
}
FALLBACK_COLOR = '#667eea'

SCORE_MIN, SCORE_MAX = 1, 5

# Excel header -> JSON field
XLSX_COLUMNS = {
    'Person': 'person_name', 'Feature': 'feature_name', 'Description': 'description',
    'Macro Area': 'macro_area', 'Impact': 'impact', 'Effort': 'effort', 'Selected': 'selected',
}
TRUTHY = {'true', 'yes', 'y', '1', 'x', 'si', 'sì'}


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    store: EvaluationStore
    reason: Optional[str] = None


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def area_color(area):
    return MACRO_AREA_COLORS.get(area, FALLBACK_COLOR)


def normalize_area(raw):
    """Exports sometimes carry literal quote characters around area names."""
    if raw is None:
        return ''
    return str(raw).replace('"', '')


def read_xlsx_sheet(filepath, sheet_name=None):
    wb = openpyxl.load_workbook(filepath, read_only=True, data_only=True)
    ws = wb[sheet_name] if sheet_name else wb.active
    rows = list(ws.iter_rows(values_only=True))
    wb.close()
    if len(rows) < 2:
        return []
    headers = [str(h).strip() if h else f'col_{i}' for i, h in enumerate(rows[0])]
    return [dict(zip(headers, row)) for row in rows[1:]]


def load_parameters():
    """Load dashboard parameters from config/parameters.xlsx, falling back to defaults."""
    path = os.path.join(DATA_DIR, 'config', 'parameters.xlsx')
    p = _default_params()
    if not os.path.exists(path):
        return p
    try:
        rows = read_xlsx_sheet(path)
    except Exception as e:
        logging.warning(f"parameters.xlsx unreadable ({type(e).__name__}: {e}), using defaults")
        return p
    param_map = {
        'Data File': 'dataFile',
        'Impact Weight': 'impactWeight',
        'Effort Weight': 'effortWeight',
        'Preference Weight': 'preferenceWeight',
    }
    for row in rows:
        key = str(row.get('Parameter', '')).strip()
        val = row.get('Value')
        if key not in param_map or val is None:
            continue
        mapped = param_map[key]
        if mapped == 'dataFile':
            p[mapped] = str(val).strip()
            continue
        weight = _to_number(val)
        if weight is None or weight < 0:
            logging.warning(f"Ignoring parameter {key}={val!r}: expected a non-negative number")
            continue
        p[mapped] = int(weight)
    return p


def _default_params():
    return {
        'dataFile': DEFAULT_DATA_FILE,
        'impactWeight': DEFAULT_WEIGHTS['impact'],
        'effortWeight': DEFAULT_WEIGHTS['effort'],
        'preferenceWeight': DEFAULT_WEIGHTS['preference'],
    }


def resolve_data_path(params=None):
    """DASHBOARD_DATA_FILE wins over parameters.xlsx; relative paths live under data/."""
    params = params or _default_params()
    path = os.environ.get('DASHBOARD_DATA_FILE') or params.get('dataFile') or DEFAULT_DATA_FILE
    if not os.path.isabs(path):
        path = os.path.join(DATA_DIR, path)
    return path


def load_dataset(path=None):
    """Single load of the evaluation export. Always returns a LoadResult."""
    path = path or resolve_data_path(load_parameters())
    try:
        if not os.path.exists(path):
            raise FileNotFoundError(f"data file not found: {path}")
        if path.lower().endswith(('.xlsx', '.xlsm')):
            records = _read_xlsx_evaluations(path)
        else:
            with open(path, 'r', encoding='utf-8') as f:
                records = json.load(f)
        store = build_store(records, source=path)
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        logging.warning(f"Evaluation load failed, continuing with empty dataset ({reason})")
        return LoadResult(ok=False, store=EvaluationStore(source=path), reason=reason)

    if store.is_empty:
        logging.warning(f"No usable evaluations in {path}, dashboard will be empty")
    logging.info(f"Loaded {len(store.evaluations)} evaluations from {len(store.people)} people ({path})")
    return LoadResult(ok=True, store=store)


def build_store(records, source=None):
    """Validate raw person records and freeze them into an EvaluationStore.

    Raises ValueError when the top level is not a list of person records;
    individual bad entries are skipped with a warning.
    """
    if not isinstance(records, list):
        raise ValueError(f"expected a list of person records, got {type(records).__name__}")

    people = []
    evaluations = []
    seen_by_person = {}
    for i, rec in enumerate(records):
        if not isinstance(rec, dict):
            logging.warning(f"Skipping person record #{i}: not an object")
            continue
        name = rec.get('person_name')
        features = rec.get('features')
        if not name or not isinstance(features, list):
            logging.warning(f"Skipping person record #{i}: missing person_name or features list")
            continue
        name = str(name).strip()
        if name not in people:
            people.append(name)
        seen = seen_by_person.setdefault(name, set())
        for feat in features:
            ev = _parse_evaluation(name, feat)
            if ev is None:
                continue
            if ev.feature_name in seen:
                logging.warning(f"Duplicate evaluation of '{ev.feature_name}' by {name} ignored")
                continue
            seen.add(ev.feature_name)
            evaluations.append(ev)

    return EvaluationStore(people=tuple(people), evaluations=tuple(evaluations), source=source)


def _parse_evaluation(person, feat):
    if not isinstance(feat, dict):
        logging.warning(f"Skipping non-object feature entry for {person}")
        return None
    fname = feat.get('feature_name')
    if not fname:
        logging.warning(f"Skipping feature without feature_name for {person}")
        return None
    impact = _to_number(feat.get('impact'))
    effort = _to_number(feat.get('effort'))
    if impact is None or effort is None:
        logging.warning(f"Skipping '{fname}' for {person}: impact/effort not numeric "
                        f"({feat.get('impact')!r}, {feat.get('effort')!r})")
        return None
    if not (SCORE_MIN <= impact <= SCORE_MAX and SCORE_MIN <= effort <= SCORE_MAX):
        logging.warning(f"'{fname}' for {person}: impact/effort outside 1-5, clamped")
        impact = clamp(impact, SCORE_MIN, SCORE_MAX)
        effort = clamp(effort, SCORE_MIN, SCORE_MAX)
    return Evaluation(
        person=person,
        feature_name=str(fname),
        description=str(feat.get('description') or ''),
        macro_area=normalize_area(feat.get('macro_area')),
        impact=impact,
        effort=effort,
        selected=_to_bool(feat.get('selected')),
    )


def _to_number(val):
    if isinstance(val, bool) or val is None:
        return None
    try:
        num = float(val)
    except (ValueError, TypeError):
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return int(num) if num.is_integer() else num


def _to_bool(val):
    if isinstance(val, str):
        return val.strip().lower() in TRUTHY
    return bool(val)


def _read_xlsx_evaluations(path):
    """Flat sheet (one row per evaluation) -> person records in first-seen order."""
    rows = read_xlsx_sheet(path)
    by_person = {}
    for row in rows:
        rec = {XLSX_COLUMNS[h]: v for h, v in row.items() if h in XLSX_COLUMNS}
        person = rec.pop('person_name', None)
        if person is None or str(person).strip() == '':
            continue
        person = str(person).strip()
        by_person.setdefault(person, []).append(rec)
    return [{'person_name': p, 'features': feats} for p, feats in by_person.items()]
