"""
Tiered program generation: full -> simplified -> basic prompts until one works.
"""

import logging
from datetime import datetime, timezone

from program_engine.completion import parse_json_response
from program_engine.errors import ResponseParseError
from program_engine.guidelines import GUIDELINE_KEYS, fetch_guidelines
from program_engine.profile_enhancer import process_user_data
from program_engine.program_validator import validate_program
from program_engine.prompt_composer import TIERS, PromptComposer

logger = logging.getLogger(__name__)


class ProgramGenerator:
    """Runs the pre-analysis and the tiered generation loop for one request."""

    def __init__(self, completion_client, guideline_source=None, config=None, response_sink=None):
        """
        Args:
            completion_client: Object with complete(prompt, temperature, max_tokens, json_only).
            guideline_source: Object with get_guideline(key), or None.
            config: Configuration dict (see config.load_config).
            response_sink: Optional callable(attempt_dict) receiving each raw
                response for diagnostics. Failures in the sink are ignored.
        """
        self.completion_client = completion_client
        self.guideline_source = guideline_source
        self.config = config or {}
        self.response_sink = response_sink

    def _record(self, attempt):
        if self.response_sink is None:
            return
        try:
            self.response_sink(attempt)
        except Exception as exc:
            logger.warning("Raw response sink failed: %s", exc)

    def _model_name(self):
        return (
            getattr(self.completion_client, "model", None)
            or (self.config.get("completion", {}) or {}).get("model")
            or "unknown"
        )

    def generate_program(self, user, onboarding, has_paid_access, validator=None):
        """
        Generate a program, stepping down complexity tiers on failure.

        Args:
            user: Dict with name and experience_level.
            onboarding: Onboarding answers.
            has_paid_access: False limits the output to a one-week preview.
            validator: Optional callable(program) -> validation dict. When
                given, a failing validation also moves on to the next tier.

        Returns:
            Dict with success, program, tier, attempts, error, attempt_log
            and metadata. Never raises.
        """
        try:
            analysis = process_user_data(user, onboarding)
        except Exception as exc:
            logger.exception("Profile processing failed")
            return self._failure(f"Could not process user data: {exc}", [], None)

        guideline_settings = self.config.get("guidelines", {}) or {}
        guidelines = fetch_guidelines(
            self.guideline_source,
            GUIDELINE_KEYS,
            max_workers=guideline_settings.get("max_workers", 4),
        )
        composer = PromptComposer(guidelines)
        completion_settings = self.config.get("completion", {}) or {}

        attempt_log = []
        last_error = None
        validation_errors = 0

        for tier in TIERS:
            prompt = composer.compose(
                tier,
                analysis["enhanced_profile"],
                analysis["volume_landmarks"],
                analysis["weak_point_analysis"],
                analysis["periodization_model"],
                has_paid_access,
            )
            attempt = {
                "tier": tier,
                "prompt": prompt,
                "raw_response": None,
                "outcome": None,
                "error": None,
                "violations": [],
            }
            attempt_log.append(attempt)
            logger.info("Generation attempt %d (%s tier)", len(attempt_log), tier)
            logger.debug("Prompt for %s tier:\n%s", tier, prompt)

            try:
                raw = self.completion_client.complete(
                    prompt,
                    temperature=completion_settings.get("generation_temperature"),
                    max_tokens=completion_settings.get("max_tokens"),
                    json_only=True,
                )
            except Exception as exc:
                attempt["outcome"] = "service_error"
                attempt["error"] = last_error = str(exc)
                logger.warning("%s tier: completion failed: %s", tier, exc)
                self._record(attempt)
                continue

            attempt["raw_response"] = raw
            try:
                program = parse_json_response(raw)
            except ResponseParseError as exc:
                attempt["outcome"] = "parse_error"
                attempt["error"] = last_error = str(exc)
                logger.warning("%s tier: unparseable response: %s", tier, exc)
                self._record(attempt)
                continue

            if validator is not None:
                try:
                    validation = validator(program)
                except Exception as exc:
                    logger.exception("%s tier: validator raised", tier)
                    validation = {
                        "valid": False,
                        "violations": [{"path": "program", "code": "validator_error", "message": str(exc)}],
                        "summary": f"Validator raised {type(exc).__name__}: {exc}",
                    }
                if not validation["valid"]:
                    validation_errors += len(validation["violations"])
                    attempt["outcome"] = "validation_error"
                    attempt["violations"] = validation["violations"]
                    attempt["error"] = last_error = validation["summary"]
                    logger.warning("%s tier: %s", tier, validation["summary"])
                    self._record(attempt)
                    continue

            attempt["outcome"] = "success"
            self._record(attempt)
            program["generatedAt"] = datetime.now(timezone.utc).isoformat()
            program["aiModelUsed"] = self._model_name()
            logger.info("Program generated with %s tier after %d attempt(s)", tier, len(attempt_log))
            return {
                "success": True,
                "program": program,
                "tier": tier,
                "attempts": len(attempt_log),
                "error": None,
                "attempt_log": attempt_log,
                "metadata": self._metadata(analysis, tier, len(attempt_log), validation_errors),
            }

        logger.error("All %d generation attempts failed: %s", len(attempt_log), last_error)
        result = self._failure(last_error or "Program generation failed.", attempt_log, analysis)
        result["metadata"]["validation_error_count"] = validation_errors
        return result

    def _failure(self, error, attempt_log, analysis):
        return {
            "success": False,
            "program": None,
            "tier": attempt_log[-1]["tier"] if attempt_log else None,
            "attempts": len(attempt_log),
            "error": error,
            "attempt_log": attempt_log,
            "metadata": self._metadata(
                analysis,
                attempt_log[-1]["tier"] if attempt_log else None,
                len(attempt_log),
                0,
            ),
        }

    @staticmethod
    def _metadata(analysis, tier, attempts, validation_errors):
        analysis = analysis or {}
        profile = analysis.get("enhanced_profile") or {}
        return {
            "complexity_tier": tier,
            "attempt_count": attempts,
            "validation_error_count": validation_errors,
            "periodization_model": analysis.get("periodization_model"),
            "weak_point_analysis": analysis.get("weak_point_analysis"),
            "volume_landmarks": analysis.get("volume_landmarks"),
            "enhanced_profile": {
                "volume_parameters": profile.get("volume_parameters"),
                "recovery_profile": profile.get("recovery_profile"),
                "injury_analysis": profile.get("injury_analysis"),
            },
        }


def generate_training_program(
    completion_client,
    user,
    onboarding,
    has_paid_access,
    guideline_source=None,
    config=None,
    response_sink=None,
):
    """
    Generate and validate a program in one call.

    Validation runs inside the tier loop, so an invalid program from the
    full tier falls back to the simplified tier and so on.
    """
    answers = onboarding or {}
    try:
        training_days = int(answers.get("training_frequency_days") or 0) or None
    except (TypeError, ValueError):
        training_days = None
    trial = not has_paid_access

    def _validate(program):
        return validate_program(
            program,
            training_days=training_days,
            trial=trial,
            require_anchor_lifts=True,
        )

    generator = ProgramGenerator(
        completion_client,
        guideline_source=guideline_source,
        config=config,
        response_sink=response_sink,
    )
    return generator.generate_program(user, onboarding, has_paid_access, validator=_validate)
