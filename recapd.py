#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "flask>=3.0.0",
#     "pyyaml>=6.0.0",
#     "requests>=2.31.0",
# ]
# ///
"""
Weekly Recap Daemon (recapd)

Serves the retro extraction and overview combination over HTTP so shortcuts
and other scripts can use them without a checkout. Configuration is loaded
from recap_config.yaml.

Run with: uv run recapd.py

Endpoints:
  GET  /                        - Health check
  POST /extract                 - Build the good/bad documents from summaries
  POST /overview                - Combine good/bad documents into an overview
  POST /weeks/<week>/overview   - Generate and store the overview for a Notion week

Test extraction:
curl -X POST http://localhost:9877/extract \
  -H "Content-Type: application/json" \
  -d '{"task_summary": "===== ROCKS =====\\n✅ Made progress - Ship v2", "cal_summary": ""}'

Test overview:
curl -X POST http://localhost:9877/overview \
  -H "Content-Type: application/json" \
  -d '{"good": "===== EVENTS =====\\nWed dinner with Bob", "bad": "===== EVENTS =====\\nMon call with Alice"}'
"""

from flask import Flask, request, jsonify
import argparse
import logging

from notion_store import NotionError, NotionRecapStore, truncate_for_notion, utf16_length
from recap_combine import generate_overview
from recap_config import field_name, get_nested, load_config, notion_settings
from retro_extraction import MODES, build_retro_document

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 9877

# Summaries are Notion rich text; this leaves plenty of headroom.
MAX_PAYLOAD_SIZE = 256 * 1024


def _error(message: str, status: int):
    return jsonify({'status': 'error', 'message': message}), status


def _text_field(data: dict, key: str) -> str:
    """Optional string field; None becomes ''. Raises ValueError on other types."""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string")
    return value


def create_app(config: dict, store: NotionRecapStore | None = None) -> Flask:
    """Build the Flask app. `store` is optional; without it the week endpoints return 503."""
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = MAX_PAYLOAD_SIZE

    retro_config = config.get('retro') or {}
    recap_config = config.get('recap') or {}
    text_limit = notion_settings(config)['text_limit']

    def _json_payload() -> dict:
        if not request.is_json:
            logger.warning(f"Invalid content type: {request.content_type}")
            raise ValueError('Content-Type must be application/json')
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError('Request body must be a JSON object')
        return data

    @app.route('/', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'service': 'recapd',
            'endpoints': {
                'health': '/',
                'extract': '/extract',
                'overview': '/overview',
                'week_overview': '/weeks/<week>/overview',
            },
            'notion': {
                'configured': store is not None,
            },
        }), 200

    @app.route('/extract', methods=['POST'])
    def extract():
        """
        Split task/calendar summaries into good and bad documents.

        Expected payload:
        {
            "task_summary": "===== TRIPS =====\\n...",
            "cal_summary": "===== CAL EVENTS =====\\n...",
            "mode": "both"            // optional: both | good | bad
        }
        """
        try:
            data = _json_payload()
            task_summary = _text_field(data, 'task_summary')
            cal_summary = _text_field(data, 'cal_summary')
            mode = data.get('mode') or 'both'

            if mode == 'both':
                modes = MODES
            elif mode in MODES:
                modes = (mode,)
            else:
                return _error(f"Invalid mode: {mode!r} (expected both, good or bad)", 400)

            if not task_summary.strip() and not cal_summary.strip():
                logger.warning("Extract request with empty summaries")
                return _error('task_summary or cal_summary must be provided', 400)

            documents = {m: build_retro_document(task_summary, cal_summary, m, retro_config) for m in modes}
            logger.info(f"Extracted {', '.join(modes)} ({', '.join(str(len(d)) for d in documents.values())} chars)")
            return jsonify({'status': 'success', **documents}), 200

        except ValueError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.error(f"Error extracting retro: {str(e)}", exc_info=True)
            return _error(f'Internal server error: {str(e)}', 500)

    @app.route('/overview', methods=['POST'])
    def overview():
        """
        Combine good and bad documents into the overview.

        Expected payload:
        {
            "good": "===== EVENTS =====\\n...",
            "bad": "===== EVENTS =====\\n..."
        }
        """
        try:
            data = _json_payload()
            good = _text_field(data, 'good')
            bad = _text_field(data, 'bad')

            result = generate_overview(good, bad, recap_config)
            logger.info(f"Generated overview ({len(result)} chars)")
            return jsonify({'status': 'success', 'overview': result}), 200

        except ValueError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.error(f"Error generating overview: {str(e)}", exc_info=True)
            return _error(f'Internal server error: {str(e)}', 500)

    @app.route('/weeks/<int:week>/overview', methods=['POST'])
    def week_overview(week: int):
        """
        Read the week's good/bad columns from Notion and write the overview column.

        Optional payload: {"dry_run": true} returns the overview without writing.
        """
        if store is None:
            return _error('Notion is not configured (set NOTION_TOKEN and RECAP_DATABASE_ID)', 503)

        try:
            data = request.get_json(silent=True) if request.is_json else None
            dry_run = bool((data or {}).get('dry_run'))

            page = store.find_week_page(week)
            if not page:
                logger.warning(f"Week {week} recap page not found")
                return _error(f'Could not find Week {week} Recap', 404)

            good = store.read_field(page, field_name(config, 'good'))
            bad = store.read_field(page, field_name(config, 'bad'))
            if not good and not bad:
                logger.info(f"Week {week}: good and bad columns are empty, skipping")
                return jsonify({'status': 'skipped', 'week': week, 'message': 'Both columns are empty'}), 200

            result = generate_overview(good, bad, recap_config)
            if utf16_length(result) > text_limit:
                logger.warning(f"Week {week}: overview is {utf16_length(result)} chars, truncating to {text_limit}")
            result = truncate_for_notion(result, text_limit)

            response_data = {
                'status': 'success',
                'week': week,
                'overview': result,
                'written': False,
            }

            if not dry_run:
                ok, message = store.write_fields(page['id'], {field_name(config, 'overview'): result})
                if not ok:
                    logger.error(f"Week {week}: {message}")
                    return _error(message, 502)
                response_data['written'] = True
                logger.info(f"Week {week} overview updated")

            return jsonify(response_data), 200

        except NotionError as e:
            logger.error(f"Notion error for week {week}: {e}")
            return _error(str(e), 502)
        except Exception as e:
            logger.error(f"Error generating week {week} overview: {str(e)}", exc_info=True)
            return _error(f'Internal server error: {str(e)}', 500)

    @app.errorhandler(413)
    def payload_too_large(e):
        return _error(f'Payload too large. Maximum size is {MAX_PAYLOAD_SIZE} bytes.', 413)

    return app


def build_store(config: dict) -> NotionRecapStore | None:
    """Notion store from config/env, or None when credentials are missing."""
    try:
        return NotionRecapStore.from_settings(notion_settings(config))
    except ValueError as e:
        logger.warning(f"Notion disabled: {e}")
        return None


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Weekly Recap Daemon (recapd)')
    parser.add_argument('--config', default=None, help='Path to recap_config.yaml')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    # Configure logging based on --debug flag
    logging.getLogger().setLevel(logging.DEBUG if args.debug else logging.INFO)

    config = load_config(args.config)
    host = get_nested(config, ['server', 'host'], DEFAULT_HOST)
    port = int(get_nested(config, ['server', 'port'], DEFAULT_PORT))

    app = create_app(config, build_store(config))

    logger.info(f"Starting recapd on {host}:{port}")
    logger.info(f"Health check: http://{host}:{port}/")
    logger.info(f"Extract: http://{host}:{port}/extract")
    logger.info(f"Overview: http://{host}:{port}/overview")
    app.run(host=host, port=port, debug=False)
