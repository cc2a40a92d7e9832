# -*- coding: utf-8 -*-
"""
nuChladni - Web Version
Run: python -m nuchladni serve
Opens a browser on http://localhost:5000
"""
from __future__ import annotations

import logging
import webbrowser
from threading import Timer

from flask import Flask, jsonify, render_template_string, request

from .core.deformer import PRESETS, AmplitudeRange, Preset, ShapeDeformer
from .core.orbit import angle_from_camera
from .core.renderer import NUM_POINTS_PHI, NUM_POINTS_THETA, Renderer
from .utils.image_ops import PilSurface, encode_png_base64

logger = logging.getLogger(__name__)

# Upper bounds for per-request surface size and mesh resolution.
MAX_SIZE = 2048
MAX_POINTS = 200

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>nuChladni</title>
    <style>
        body { background: #0b0b0b; color: #fff; font-family: 'Helvetica Neue', Arial, sans-serif; font-size: 14px; display: flex; gap: 20px; padding: 20px; }
        .controls { width: 280px; display: flex; flex-direction: column; gap: 8px; }
        .slider-container { display: flex; gap: 8px; align-items: center; }
        .slider-container label { flex: 0 0 70px; }
        img { border: 1px solid #222; }
    </style>
</head>
<body>
    <div class="controls">
        {% for m in modes %}
        <div class="slider-container" title="{{ m.description }}">
            <label>{{ m.name }}:</label>
            <input type="range" class="mode" data-index="{{ loop.index0 }}" min="{{ rng.min }}" max="{{ rng.max }}" step="{{ rng.step }}" value="{{ m.amplitude }}">
            <span class="value-display">{{ m.amplitude }}</span>
        </div>
        {% endfor %}
        <div class="slider-container"><label>Rotate X:</label><input type="range" id="rotX" min="-100" max="100" value="0"></div>
        <div class="slider-container"><label>Orbit:</label><input type="range" id="camAngle" min="-100" max="100" value="0"></div>
        <div class="slider-container"><label>Depth:</label><input type="range" id="depth" min="0" max="4" step="0.1" value="0"></div>
        <select id="preset">
            {% for key, p in presets.items() %}<option value="{{ key }}">{{ p.name }}</option>{% endfor %}
        </select>
        <button id="reset">Reset Deformations</button>
    </div>
    <img id="frame" width="{{ width }}" height="{{ height }}">
    <script>
        const post = (url, body) => fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body || {})}).then(r => r.json());
        function render() {
            post('/render', {
                rot_x: parseFloat(document.getElementById('rotX').value),
                cam_angle: parseFloat(document.getElementById('camAngle').value),
                depth: parseFloat(document.getElementById('depth').value)
            }).then(d => { if (d.success) document.getElementById('frame').src = 'data:image/png;base64,' + d.image_data; });
        }
        function sync(modes) {
            document.querySelectorAll('.mode').forEach((s, i) => { s.value = modes[i].amplitude; s.nextElementSibling.textContent = modes[i].amplitude; });
            render();
        }
        document.querySelectorAll('.mode').forEach(s => s.addEventListener('input', () => {
            s.nextElementSibling.textContent = s.value;
            post('/amplitude', {index: parseInt(s.dataset.index), value: parseFloat(s.value)}).then(render);
        }));
        ['rotX', 'camAngle', 'depth'].forEach(id => document.getElementById(id).addEventListener('input', render));
        document.getElementById('preset').addEventListener('change', e => post('/preset', {key: e.target.value}).then(d => sync(d.modes)));
        document.getElementById('reset').addEventListener('click', () => post('/reset').then(d => sync(d.modes)));
        render();
    </script>
</body>
</html>
"""


def create_app(
    deformer: ShapeDeformer | None = None,
    width: int = 800,
    height: int = 600,
    amplitude_range: AmplitudeRange | None = None,
    max_size: int = MAX_SIZE,
    max_points: int = MAX_POINTS,
) -> Flask:
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024

    if deformer is None:
        deformer = ShapeDeformer()
    rng = amplitude_range or AmplitudeRange()
    # shared light and outline settings; every request paints its own surface
    renderer = Renderer(PilSurface(width, height), deformer)

    app.extensions['nuchladni'] = {'deformer': deformer, 'renderer': renderer}

    @app.route('/')
    def index():
        return render_template_string(
            HTML_TEMPLATE, modes=deformer.mode_info(), rng=rng, presets=PRESETS, width=width, height=height
        )

    @app.route('/modes')
    def modes():
        return jsonify({'success': True, 'modes': deformer.mode_info(), 'range': vars(rng)})

    @app.route('/presets')
    def presets():
        return jsonify({'success': True, 'presets': {k: p.to_dict() for k, p in PRESETS.items()}})

    @app.route('/amplitude', methods=['POST'])
    def set_amplitude():
        try:
            data = request.json
            index = int(data['index'])
            value = rng.clamp(data['value'])
            if not deformer.set_amplitude(index, value):
                return jsonify({'success': False, 'error': f'no mode at index {index}'}), 400
            return jsonify({'success': True, 'amplitude': value})
        except Exception as e:
            logger.error(f"Amplitude error: {e}")
            return jsonify({'success': False, 'error': str(e)}), 400

    @app.route('/preset', methods=['POST'])
    def apply_preset():
        try:
            data = request.json
            if 'key' in data:
                preset = PRESETS[data['key']]
            else:
                preset = Preset.from_dict(data)
            deformer.apply_preset(preset)
            return jsonify({'success': True, 'modes': deformer.mode_info()})
        except Exception as e:
            logger.error(f"Preset error: {e}")
            return jsonify({'success': False, 'error': str(e)}), 400

    @app.route('/reset', methods=['POST'])
    def reset():
        deformer.reset_amplitudes()
        return jsonify({'success': True, 'modes': deformer.mode_info()})

    @app.route('/render', methods=['POST'])
    def render_frame():
        try:
            data = request.json or {}
            if 'camera' in data:
                cam_angle = angle_from_camera(data['camera'])
            else:
                cam_angle = float(data.get('cam_angle', 0.0))
            w = min(max_size, int(data.get('width', width)))
            h = min(max_size, int(data.get('height', height)))
            surface = PilSurface(w, h)
            frame = Renderer(surface, deformer, renderer.config)
            frame.light_dir = renderer.light_dir
            tris = frame.draw(
                float(data.get('rot_x', 0.0)),
                cam_angle,
                float(data.get('depth', 0.0)),
                min(max_points, int(data.get('num_points_theta', NUM_POINTS_THETA))),
                min(max_points, int(data.get('num_points_phi', NUM_POINTS_PHI))),
            )
            return jsonify({
                'success': True,
                'image_data': encode_png_base64(surface.image),
                'triangles': len(tris),
            })
        except Exception as e:
            logger.error(f"Render error: {e}")
            return jsonify({'success': False, 'error': str(e)}), 400

    return app


def open_browser(port: int = 5000):
    """Open browser after short delay"""
    webbrowser.open(f'http://localhost:{port}')


def serve(host: str = '127.0.0.1', port: int = 5000, open_browser_after: float | None = 1.5):
    print("=" * 60)
    print("nuChladni - Web Version")
    print("=" * 60)
    print(f"\nServing on http://localhost:{port}")
    print("\nPress Ctrl+C to stop\n")
    print("=" * 60)

    if open_browser_after is not None:
        Timer(open_browser_after, open_browser, args=(port,)).start()

    app = create_app()
    app.run(host=host, port=port, debug=False)
