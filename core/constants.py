"""Constants for the Vosk HTTP server."""

# Only path prefix served; any other path is rejected with 405
HTTP_PATH = "/transcript"

# Default HTTP port when neither --port nor PORT is set
DEFAULT_HTTP_PORT = 3000

# Vosk log level meaning "no engine logs"
VOSK_LOG_LEVEL_SILENT = -1

# Frames fed to the recognizer per AcceptWaveform call
WAV_FRAMES_PER_READ = 4000

# Audio requirements for Vosk input
WAV_CHANNELS = 1
WAV_SAMPLE_WIDTH = 2
WAV_COMPRESSION = "NONE"
