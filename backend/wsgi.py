import sys
import os

# Make the flat backend modules importable when started from elsewhere
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app import create_app

app = create_app()

# Passenger looks for 'application'
application = app
