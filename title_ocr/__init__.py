"""Vehicle title OCR.

Infers a VIN suffix, license plate, model year, make and model, each
with a confidence score, from noisy OCR of photographed or scanned
vehicle title and registration documents.
"""

__version__ = "1.0.0"
