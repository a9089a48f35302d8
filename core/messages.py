"""Centralized error and log message templates for the transcription server."""


class ErrorMessages:
    """Centralized error message templates."""

    # Routing errors
    PATH_NOT_ALLOWED = "path not allowed {path}"
    METHOD_NOT_ALLOWED = "method not allowed {method}"

    # Request validation errors
    SPEECH_MISSING = 'id {id} "speech" attribute not found in the query string'
    MODEL_UNKNOWN = "id {id} Vosk model {model} unknown"
    BODY_TOO_LARGE = "id {id} request body exceeds {limit} bytes"

    # Engine errors
    TRANSCRIPT_FAILED = "id {id} transcript function {error}"

    # Startup errors
    MODEL_DIR_MISSING = "model directory is required (--model or MODEL_DIR)"
    MODEL_DIR_NOT_FOUND = "Model directory not found: {path}"
    MODEL_INIT_FAILED = "Failed to initialize Vosk model from {path}: {error}"
    MODEL_ALREADY_LOADED = "A Vosk model was already loaded by this process"
    MODEL_RELEASED = "Vosk model {name} was released"
    DEBUG_INVALID = "debug must be a boolean flag or an integer log level, got {value!r}"

    # Audio errors
    AUDIO_FILE_NOT_FOUND = "Audio file not found: {path}"
    AUDIO_INVALID_WAV = "Invalid WAV data: {error}"
    AUDIO_UNSUPPORTED_FORMAT = (
        "Audio must be WAV format mono PCM 16-bit "
        "(channels={channels}, sample_width={sample_width}, compression={compression})"
    )


class LogMessages:
    """Centralized log message templates."""

    # Startup
    MODEL_PATH = "Model path: {path}"
    MODEL_NAME = "Model name: {name}"
    HTTP_PORT = "HTTP server port: {port}"
    DEBUG_STATE = "internal debug log: {debug}"
    VOSK_LOG_LEVEL = "Vosk log level: {level}"
    MODEL_LOADING = "wait loading Vosk model: {name} (be patient)"
    MODEL_LOADED = "Vosk model loaded in {latency} msecs"
    SERVER_RUNNING = "server running at http://{host}:{port}"
    SERVER_ENDPOINT = "endpoint http://{host}:{port}{path}"
    SERVER_HINT = "press Ctrl-C to shutdown"
    SERVER_READY = "ready to listen incoming requests"

    # Requests
    REQUEST_GET = "request GET {id} {speech} {model} {grammar}"
    REQUEST_POST = "request POST {id} speechBuffer {model} {grammar}"
    RESPONSE = "response {id} {body}"
    ACTIVE_REQUESTS = "active requests {count}"
    LATENCY = "latency {id} {latency}ms"
    BODY_RECEIVED = "id {id} body received ({size} bytes)"

    # Shutdown
    SHUTDOWN_RECEIVED = "{reason} received"
    SHUTDOWN_DONE = "Shutdown done"
    UNCAUGHT_ERROR = "there was an uncaught error: {error}"
    MODEL_RELEASED = "Vosk model {name} released"
