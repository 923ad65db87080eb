"""
Domain models for the MPI ledger service.

This module contains the patient record and its byte codec.
"""
from models.patient import Patient, PATIENT_FIELDS, encode_patient, decode_patient, is_utf8_text

__all__ = ["Patient", "PATIENT_FIELDS", "encode_patient", "decode_patient", "is_utf8_text"]
