"""Flask application exposing portfolio forecasting and tenant turnover prediction."""

import logging
from flask import Flask, current_app, jsonify, request

from config import AI_FORECASTING, AI_TURNOVER_PREDICTOR, DEBUG, PORT, SECRET_KEY
from services.errors import NotFoundError, ValidationError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _run(action, failure_message: str):
    """Call a service operation and wrap the result in the JSON envelope."""
    try:
        data = action()
    except ValidationError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    except Exception:
        logger.exception(failure_message)
        return jsonify({"success": False, "error": failure_message}), 500
    return jsonify({"success": True, "data": data})


def _disabled(flag: str, feature: str):
    if current_app.config.get(flag):
        return None
    return jsonify({"success": False, "error": f"{feature} feature is not enabled"}), 501


def _default_services():
    from services.api_clients.property_api_client import PropertyApiClient
    from services.forecasting_service import ForecastingService
    from services.reasoning_client import ReasoningClient
    from services.turnover_service import TurnoverService

    repository = PropertyApiClient()
    reasoning = ReasoningClient.from_config()
    return ForecastingService(repository, reasoning), TurnoverService(repository, reasoning)


def create_app(forecasting_service=None, turnover_service=None,
               ai_forecasting: bool = None, ai_turnover_predictor: bool = None) -> Flask:
    """Build the app with injected services; missing ones are built from config."""
    if forecasting_service is None or turnover_service is None:
        default_forecasting, default_turnover = _default_services()
        forecasting_service = forecasting_service or default_forecasting
        turnover_service = turnover_service or default_turnover

    app = Flask(__name__)
    app.secret_key = SECRET_KEY
    app.config["AI_FORECASTING"] = AI_FORECASTING if ai_forecasting is None else ai_forecasting
    app.config["AI_TURNOVER_PREDICTOR"] = (
        AI_TURNOVER_PREDICTOR if ai_turnover_predictor is None else ai_turnover_predictor
    )

    # --- Forecasting ---

    @app.route("/api/ai/forecast/portfolio", methods=["POST"])
    def forecast_portfolio():
        disabled = _disabled("AI_FORECASTING", "AI Forecasting")
        if disabled:
            return disabled
        body = _body()
        return _run(lambda: forecasting_service.forecast_portfolio(
            body.get("landlordId"),
            horizon_months=body.get("forecastPeriodMonths", 12),
            include_scenarios=bool(body.get("includeGrowthScenarios", True)),
            include_market_factors=bool(body.get("includeMarketFactors", True)),
        ), "Failed to generate portfolio forecast")

    @app.route("/api/ai/forecast/property/<property_id>", methods=["POST"])
    def forecast_property(property_id):
        disabled = _disabled("AI_FORECASTING", "AI Forecasting")
        if disabled:
            return disabled
        body = _body()
        return _run(lambda: forecasting_service.forecast_property(
            property_id, horizon_months=body.get("forecastPeriodMonths", 12),
        ), "Failed to generate property forecast")

    @app.route("/api/ai/forecast/summary/<landlord_id>")
    def forecast_summary(landlord_id):
        return _run(lambda: forecasting_service.portfolio_summary(landlord_id),
                    "Failed to fetch forecast summary")

    @app.route("/api/ai/forecast/trends/<landlord_id>")
    def forecast_trends(landlord_id):
        months = request.args.get("months", 12)
        return _run(lambda: forecasting_service.get_historical_trends(landlord_id, months),
                    "Failed to fetch historical trends")

    @app.route("/api/ai/forecast/scenarios", methods=["POST"])
    def forecast_scenarios():
        disabled = _disabled("AI_FORECASTING", "AI Forecasting")
        if disabled:
            return disabled
        body = _body()
        return _run(lambda: forecasting_service.generate_scenarios(
            body.get("landlordId"),
            scenario_names=body.get("scenarios"),
            horizon_months=body.get("forecastMonths", 12),
        ), "Failed to generate forecast scenarios")

    # --- Turnover ---

    @app.route("/api/ai/turnover/predict/<lease_id>", methods=["POST"])
    def predict_turnover(lease_id):
        disabled = _disabled("AI_TURNOVER_PREDICTOR", "AI Turnover Predictor")
        if disabled:
            return disabled
        return _run(lambda: turnover_service.predict_turnover(lease_id),
                    "Failed to predict tenant turnover")

    @app.route("/api/ai/turnover/portfolio", methods=["POST"])
    def turnover_portfolio():
        disabled = _disabled("AI_TURNOVER_PREDICTOR", "AI Turnover Predictor")
        if disabled:
            return disabled
        body = _body()
        return _run(lambda: turnover_service.analyze_portfolio_turnover(body.get("landlordId")),
                    "Failed to analyze portfolio turnover")

    @app.route("/api/ai/turnover/dashboard/<landlord_id>")
    def turnover_dashboard(landlord_id):
        return _run(lambda: turnover_service.turnover_dashboard(landlord_id),
                    "Failed to fetch turnover dashboard")

    @app.route("/api/ai/turnover/risk-factors/<lease_id>")
    def turnover_risk_factors(lease_id):
        return _run(lambda: turnover_service.get_risk_factors(lease_id),
                    "Failed to fetch risk factors")

    @app.route("/api/ai/turnover/interventions/<lease_id>")
    def turnover_interventions(lease_id):
        return _run(lambda: turnover_service.get_interventions(lease_id),
                    "Failed to fetch intervention recommendations")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=PORT, debug=DEBUG, use_reloader=False)
