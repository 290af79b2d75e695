"""
Flask web server for the WeaR Lang playground
Serves the HTML interface and provides the translation API
"""

from flask import Flask, request, jsonify
from flask_cors import CORS
from wearc import Translator, WearSyntaxError, keyword_spellings
import sys
import io
import traceback
from contextlib import redirect_stdout

app = Flask(__name__, static_folder='static', static_url_path='')
CORS(app)  # Enable CORS for local development


def format_error(error):
    """Convert a CompileError to JSON-serializable format"""
    return {
        'code': error.code,
        'message': error.message,
        'line': error.line,
        'column': error.column,
        'index': error.index,
        'token_value': error.token_value,
        'context': error.context,
        'pointer': error.pointer(),
    }


def format_token(num, token):
    return {
        'num': num,
        'type': token.type.value,
        'value': token.value,
        'line': token.line,
        'column': token.column,
        'index': token.index
    }


def empty_response(error, debug_output=""):
    return {
        'error': error,
        'c_code': '',
        'errors': [],
        'warnings': [],
        'debug_output': debug_output,
    }


@app.route('/')
def index():
    """Serve the main HTML page"""
    return app.send_static_file('index.html')


@app.route('/keywords')
def keywords():
    """Keyword spellings grouped by kind"""
    return jsonify(keyword_spellings())


@app.route('/translate', methods=['POST'])
def translate():
    """Translation API endpoint"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    source = data.get('source', '')
    debug = bool(data.get('debug', False))

    if not isinstance(source, str) or not source.strip():
        return jsonify(empty_response('No source provided')), 400

    # fresh translator per request; nothing is shared between translations
    translator = Translator(debug=debug)
    output_capture = io.StringIO()

    try:
        with redirect_stdout(output_capture):
            result = translator.translate(source)
    except WearSyntaxError as e:
        body = empty_response(str(e), output_capture.getvalue() if debug else '')
        body['errors'] = [format_error(e.error)]
        return jsonify(body), 400
    except Exception as e:
        traceback_str = traceback.format_exc()
        print(f"Translation error: {e}", file=sys.stderr)
        print(traceback_str, file=sys.stderr)

        body = empty_response(str(e), output_capture.getvalue() if debug else '')
        body['traceback'] = traceback_str if debug else None
        return jsonify(body), 500

    response_data = {
        'c_code': result['c_code'],
        'errors': [],
        'warnings': [format_error(w) for w in result['warnings']],
        'types': {name: kind.value for name, kind in result['types'].items()},
        'functions': result['function_names'],
    }

    if debug:
        debug_output = output_capture.getvalue()
        response_data['debug_output'] = debug_output
        response_data['tokens'] = [
            format_token(num, token) for num, token in enumerate(result['tokens'])
        ]
        response_data['debug_metadata'] = {
            'output_length': len(debug_output),
            'tokens_count': len(result['tokens']),
            'c_code_length': len(result['c_code']),
        }
        print(f"[SERVER DEBUG] Captured {len(debug_output)} characters of debug output",
              file=sys.stderr)

    return jsonify(response_data)


def main():
    print("=" * 70)
    print("WeaR Lang Playground - Web Server")
    print("=" * 70)
    print("\nStarting server on http://localhost:5000")
    print("Open your browser and navigate to: http://localhost:5000")
    print("\nPress Ctrl+C to stop the server")
    print("=" * 70 + "\n")

    app.run(debug=True, host='0.0.0.0', port=5000)


if __name__ == '__main__':
    main()
