"""Mass properties and motor mixer synthesis for multi-rotor frames."""
from framemixer.config import APP_VERSION as __version__
