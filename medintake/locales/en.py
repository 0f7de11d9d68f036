# medintake/locales/en.py
"""English catalog. The key set is the reference for every other locale."""

MESSAGES = {
    # Patient assessment (triage)
    "patient.assessment_title": "Patient Assessment",
    "patient.emergency_warning": "If you are experiencing a medical emergency, call emergency services immediately.",
    "patient.symptoms_label": "Describe your symptoms",
    "patient.symptoms_placeholder": "Please describe your symptoms in detail...",
    "patient.severity_label": "Pain or discomfort level",
    "patient.duration_label": "How long have you had these symptoms?",
    "patient.photo_label": "Upload a photo (optional)",
    "patient.submit_assessment": "Submit Assessment",
    "patient.triage_results": "Triage Results",

    # Ambulance booking (dispatch)
    "ambulance.booking_title": "Emergency Ambulance",
    "ambulance.location_sharing": "Share your location",
    "ambulance.emergency_type": "Emergency type",
    "ambulance.severity_critical": "Critical - life threatening",
    "ambulance.severity_urgent": "Urgent - serious condition",
    "ambulance.severity_moderate": "Moderate - needs medical attention",
    "ambulance.request_ambulance": "Request Ambulance",
    "ambulance.ambulance_dispatched": "Ambulance Dispatched",
    "ambulance.estimated_arrival": "Estimated arrival",
    "ambulance.track_ambulance": "Track Ambulance",

    # Doctor registration (verification)
    "doctor.registration_title": "Doctor Registration",
    "doctor.personal_info": "Personal Information",
    "doctor.professional_info": "Professional Information",
    "doctor.license_number": "Medical license number",
    "doctor.specialization": "Specialization",
    "doctor.hospital_affiliation": "Hospital affiliation",
    "doctor.documents": "Documents",
    "doctor.documents_required": "All documents are required for verification.",
    "doctor.upload_license": "Medical license",
    "doctor.upload_id": "Government ID",
    "doctor.upload_hospital_letter": "Hospital affiliation letter",
    "doctor.submit_registration": "Submit Registration",
    "doctor.verification_pending": "Verification Pending",
    "doctor.verification_approved": "Verification Approved",
    "doctor.verification_rejected": "Verification Rejected",

    # Notifications
    "notify.missing_information.title": "Missing information",
    "notify.missing_information.triage": "Please fill in all required fields.",
    "notify.missing_information.dispatch": "Please share your location and select emergency type.",
    "notify.missing_information.verification": "Please complete these sections before submitting: {sections}.",
    "notify.invalid_input.title": "Invalid input",
    "notify.invalid_input.description": "Please check your entry: {message}",
    "notify.photo_uploaded.title": "Photo uploaded",
    "notify.photo_uploaded.description": "Your photo has been uploaded successfully.",
    "notify.document_uploaded.title": "Document uploaded",
    "notify.document_uploaded.description": "{slot} has been uploaded successfully.",
    "notify.upload_failed.title": "Upload failed",
    "notify.upload_failed.description": "{slot} could not be uploaded. Please try again.",
    "notify.location_found.title": "Location found",
    "notify.location_found.description": "Your current location has been detected.",
    "notify.location_unsupported.title": "Location not supported",
    "notify.location_unsupported.description": "Your device doesn't support location services. Please enter your address manually.",
    "notify.location_denied.title": "Location access denied",
    "notify.location_denied.description": "Please enable location services or enter your address manually.",
    "notify.submitted.title": "Request submitted",
    "notify.submitted.description": "Your request {request_id} is being processed.",
    "notify.triage_complete.title": "Assessment complete",
    "notify.triage_complete.description": "{recommendation}",
    "notify.ambulance_dispatched.title": "Ambulance dispatched",
    "notify.ambulance_dispatched.description": "Emergency response unit {vehicle_number} is on the way.",
    "notify.ambulance_arrived.title": "Ambulance arrived",
    "notify.ambulance_arrived.description": "Emergency response unit {vehicle_number} has reached your location.",
    "notify.registration_submitted.title": "Registration submitted",
    "notify.registration_submitted.description": "Your registration has been submitted for verification. You will receive an email notification once reviewed.",
    "notify.review_decision.title": "Verification updated",
    "notify.review_decision.description": "Your registration status is now: {status}.",
    "notify.evaluation_failed.title": "Processing failed",
    "notify.evaluation_failed.description": "We could not process your request. Please try again.",
}
