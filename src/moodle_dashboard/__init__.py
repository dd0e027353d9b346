"""
Moodle Dashboard

Backend for a student dashboard on top of Moodle LMS: a web-service client
with a demo mode, session handling, a JSON HTTP service and a CLI.
"""

__version__ = "1.0.0"
__author__ = "Marco A. Escobar"
__email__ = "marcoaescobar@gmail.com"
