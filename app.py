"""
Priority Matrix: Flask API Server
Hosts the single dashboard engine instance. Every POSTed UI event becomes a
state transition followed by a full recompute from the loaded evaluations.
"""
import io
import json
import logging
import os
import traceback
from flask import Flask, jsonify, request, render_template, send_file
from engines.data_loader import load_dataset, load_parameters, resolve_data_path
from engines.dashboard import apply_event, build_view, compute_view, initial_state
from engines.models import DashboardState, EvaluationStore
from engines.scoring import QUADRANT_TITLES, quadrant_summary, sort_features

app = Flask(__name__)

STATE = {
    'store': EvaluationStore(), 'dashboard': DashboardState(),
    'params': None, 'loaded': False, '_load_error': None,
}


def _load():
    """(Re)load evaluations and start from a fresh dashboard state."""
    params = load_parameters()
    result = load_dataset(app.config.get('DATA_FILE') or resolve_data_path(params))
    STATE['params'] = params
    STATE['store'] = result.store
    STATE['dashboard'] = initial_state(result.store, params)
    STATE['_load_error'] = result.reason
    STATE['loaded'] = True
    return result


@app.before_request
def _ensure_loaded():
    if STATE['loaded']:
        return
    result = _load()
    if result.ok:
        print(f"[OK] Loaded {len(result.store.people)} people, {len(result.store.evaluations)} evaluations")
    else:
        print(f"\n{'='*60}")
        print(f"[!] DATA LOAD FAILED: dashboard will show zero features")
        print(f"[!] Reason: {result.reason}")
        print(f"[!] Fix the data file, then POST /api/refresh")
        print(f"{'='*60}\n")


def _current_view():
    return build_view(STATE['store'], STATE['dashboard'], load_error=STATE['_load_error'])


# ══════════════════════════════════════════════════════════════
#  ROUTES
# ══════════════════════════════════════════════════════════════

@app.route('/')
def index():
    return render_template('index.html', server_data=json.dumps(_current_view(), default=str),
                           load_error=STATE['_load_error'])


@app.route('/api/data')
def api_data():
    return jsonify(_current_view())


@app.route('/api/state')
def api_state():
    return jsonify(STATE['dashboard'].to_dict())


@app.route('/api/event', methods=['POST'])
def api_event():
    """Apply one UI event (weight, filter, scaling, view, sort, quadrant) and re-render."""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'JSON event object required'}), 400
    try:
        STATE['dashboard'] = apply_event(STATE['dashboard'], body)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'status': 'ok', 'data': _current_view()})


@app.route('/api/reset', methods=['POST'])
def api_reset():
    """Back to all-included filters and configured weights, same data."""
    STATE['dashboard'] = initial_state(STATE['store'], STATE['params'])
    return jsonify({'status': 'ok', 'data': _current_view()})


@app.route('/api/refresh', methods=['POST'])
def api_refresh():
    """Reload the data file from disk and reset the dashboard state."""
    result = _load()
    status = 'ok' if result.ok else 'error'
    return jsonify({'status': status, 'message': result.reason or 'Evaluations reloaded',
                    'data': _current_view()})


@app.route('/api/export')
def api_export():
    """Export the ranked table, quadrant counts and weights to Excel."""
    try:
        import openpyxl
        from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

        wb = openpyxl.Workbook()
        hf = Font(bold=True, color='FFFFFF', size=11)
        hfill = PatternFill(start_color='4A5568', end_color='4A5568', fill_type='solid')
        tb = Border(left=Side(style='thin'),right=Side(style='thin'),
                    top=Side(style='thin'),bottom=Side(style='thin'))

        def ws_write(ws, headers, rows):
            for c, h in enumerate(headers, 1):
                cell = ws.cell(row=1, column=c, value=h)
                cell.font=hf; cell.fill=hfill; cell.alignment=Alignment(horizontal='center'); cell.border=tb
            for r, row in enumerate(rows, 2):
                for c, val in enumerate(row, 1):
                    cell = ws.cell(row=r, column=c, value=val); cell.border=tb
            for col in ws.columns:
                ml = max(len(str(cell.value or '')) for cell in col)
                ws.column_dimensions[col[0].column_letter].width = min(ml+2, 50)

        state = STATE['dashboard']
        scored = compute_view(STATE['store'], state.filters, state.weights, state.scaling)
        ranked = sort_features(scored, state.sort_field, state.sort_direction)

        # 1. Ranking
        ws=wb.active; ws.title='Ranking'
        ws_write(ws, ['#','Feature','Macro Area','Impact','Effort','Preference %','Score','Quadrant','Selected By'], [
            [i, f['name'], f['macro_area'], round(f['avgImpact'],2), round(f['avgEffort'],2),
             round(f['selectionRate']), round(f['score'],1), f['quadrant'],
             ', '.join(p['name'] for p in f['people'] if p['selected'])]
            for i, f in enumerate(ranked, 1)
        ])

        # 2. Quadrants
        ws2=wb.create_sheet('Quadrants')
        summary = quadrant_summary(scored)
        ws_write(ws2, ['Quadrant','Title','Features'], [
            [q, QUADRANT_TITLES[q], n] for q, n in summary.items()
        ])

        # 3. Weights & scaling
        ws3=wb.create_sheet('Settings')
        w = state.weights
        ws_write(ws3, ['Setting','Value'], [
            ['Impact Weight', w.impact], ['Effort Weight', w.effort],
            ['Preference Weight', w.preference], ['Weight Total', w.total],
            ['Impact Scaling', 'On' if state.scaling.impact else 'Off'],
            ['Effort Scaling', 'On' if state.scaling.effort else 'Off'],
            ['Active People', ', '.join(sorted(state.filters.people))],
        ])

        buf = io.BytesIO()
        wb.save(buf)
        buf.seek(0)
        return send_file(buf, as_attachment=True, download_name='Priority_Matrix_Export.xlsx',
                         mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error':str(e)}), 500


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), threaded=False)
