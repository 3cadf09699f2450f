import sys

from image_cropper.main import run

sys.exit(run())
