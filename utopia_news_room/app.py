import argparse
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

from aggregator import analysis_to_dict
from config import ReportConfig, default_config_path, env_truthy, load_config, parse_kingdom, parse_window
from formatter import format_report
from news_parser import load_lines, run_analysis
from province_news import format_province_report, parse_province_news

app = Flask(__name__)
app.config["REPORT_CONFIG"] = ReportConfig()


class RequestError(ValueError):
    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def request_payload() -> Dict[str, Any]:
    if request.is_json:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}
    return request.form.to_dict()


def report_config(payload: Dict[str, Any]) -> ReportConfig:
    base: ReportConfig = app.config["REPORT_CONFIG"]
    overrides: Dict[str, Any] = {}
    try:
        if payload.get("home"):
            overrides["home_kingdom"] = parse_kingdom(payload["home"], "home")
        if payload.get("enemy"):
            overrides["enemy_kingdom"] = parse_kingdom(payload["enemy"], "enemy")
    except ValueError as exc:
        raise RequestError("invalid_kingdom", str(exc)) from exc

    if payload.get("window") not in (None, ""):
        try:
            overrides["unique_window"] = parse_window(payload["window"])
        except ValueError as exc:
            raise RequestError("invalid_window", str(exc)) from exc

    return ReportConfig(**{**base.to_dict(), **overrides}) if overrides else base


def request_text(payload: Dict[str, Any]) -> str:
    text = payload.get("text")
    if not isinstance(text, str) or not text.strip():
        raise RequestError("missing_text")
    return text


def is_html(payload: Dict[str, Any]) -> bool:
    value = payload.get("html")
    if isinstance(value, bool):
        return value
    return env_truthy(None if value is None else str(value))


def analyze_request():
    payload = request_payload()
    text = request_text(payload)
    config = report_config(payload)
    lines = load_lines(text, html=is_html(payload))
    since, until = payload.get("since"), payload.get("until")
    for name, value in (("since", since), ("until", until)):
        if value is not None and not isinstance(value, str):
            raise RequestError("invalid_date", f"'{name}' must be a date string like 'July 1 of YR3'")
    try:
        analysis = run_analysis(lines, config, since=since, until=until)
    except ValueError as exc:
        raise RequestError("invalid_date", str(exc)) from exc
    return analysis


@app.errorhandler(RequestError)
def handle_request_error(exc: RequestError):
    return jsonify({"error": exc.code, "detail": str(exc)}), 400


@app.route("/api/report", methods=["POST"])
def api_report():
    analysis = analyze_request()
    return Response(format_report(analysis), mimetype="text/plain")


@app.route("/api/analysis", methods=["POST"])
def api_analysis():
    analysis = analyze_request()
    return jsonify(analysis_to_dict(analysis))


@app.route("/api/province_report", methods=["POST"])
def api_province_report():
    payload = request_payload()
    summary = parse_province_news(request_text(payload))
    return jsonify({"text": format_province_report(summary), "summary": summary.to_dict()})


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True, "utc": utc_now_iso()})


def configure(config_path: Optional[str]) -> ReportConfig:
    config = load_config(config_path or default_config_path())
    app.config["REPORT_CONFIG"] = config
    return config


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default=default_config_path())
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5055)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    try:
        config = configure(args.config)
    except ValueError as exc:
        parser.error(str(exc))

    print(
        f"[app] config={args.config} home={config.home_kingdom or 'auto'} "
        f"enemy={config.enemy_kingdom or 'auto'} window={config.unique_window}"
    )
    app.run(host=args.host, port=args.port, debug=args.debug, use_reloader=False)
