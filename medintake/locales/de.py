# medintake/locales/de.py

MESSAGES = {
    # Patient assessment (triage)
    "patient.assessment_title": "Patientenbewertung",
    "patient.emergency_warning": "Bei einem medizinischen Notfall rufe sofort den Rettungsdienst.",
    "patient.symptoms_label": "Beschreibe deine Symptome",
    "patient.symptoms_placeholder": "Bitte beschreibe deine Symptome möglichst genau...",
    "patient.severity_label": "Stärke der Schmerzen oder Beschwerden",
    "patient.duration_label": "Seit wann hast du diese Symptome?",
    "patient.photo_label": "Foto hochladen (optional)",
    "patient.submit_assessment": "Bewertung absenden",
    "patient.triage_results": "Ergebnis der Ersteinschätzung",

    # Ambulance booking (dispatch)
    "ambulance.booking_title": "Rettungswagen anfordern",
    "ambulance.location_sharing": "Standort teilen",
    "ambulance.emergency_type": "Art des Notfalls",
    "ambulance.severity_critical": "Kritisch - lebensbedrohlich",
    "ambulance.severity_urgent": "Dringend - ernster Zustand",
    "ambulance.severity_moderate": "Mittel - ärztliche Hilfe nötig",
    "ambulance.request_ambulance": "Rettungswagen anfordern",
    "ambulance.ambulance_dispatched": "Rettungswagen unterwegs",
    "ambulance.estimated_arrival": "Voraussichtliche Ankunft",
    "ambulance.track_ambulance": "Rettungswagen verfolgen",

    # Doctor registration (verification)
    "doctor.registration_title": "Registrierung für Ärztinnen und Ärzte",
    "doctor.personal_info": "Persönliche Angaben",
    "doctor.professional_info": "Berufliche Angaben",
    "doctor.license_number": "Approbationsnummer",
    "doctor.specialization": "Fachrichtung",
    "doctor.hospital_affiliation": "Klinik",
    "doctor.documents": "Dokumente",
    "doctor.documents_required": "Alle Dokumente werden für die Prüfung benötigt.",
    "doctor.upload_license": "Approbationsurkunde",
    "doctor.upload_id": "Ausweisdokument",
    "doctor.upload_hospital_letter": "Bestätigung der Klinik",
    "doctor.submit_registration": "Registrierung absenden",
    "doctor.verification_pending": "Prüfung ausstehend",
    "doctor.verification_approved": "Prüfung erfolgreich",
    "doctor.verification_rejected": "Prüfung abgelehnt",

    # Notifications
    "notify.missing_information.title": "Fehlende Angaben",
    "notify.missing_information.triage": "Bitte fülle alle Pflichtfelder aus.",
    "notify.missing_information.dispatch": "Bitte teile deinen Standort und wähle die Art des Notfalls.",
    "notify.missing_information.verification": "Bitte vervollständige vor dem Absenden: {sections}.",
    "notify.invalid_input.title": "Ungültige Eingabe",
    "notify.invalid_input.description": "Bitte prüfe deine Eingabe: {message}",
    "notify.photo_uploaded.title": "Foto hochgeladen",
    "notify.photo_uploaded.description": "Dein Foto wurde erfolgreich hochgeladen.",
    "notify.document_uploaded.title": "Dokument hochgeladen",
    "notify.document_uploaded.description": "{slot} wurde erfolgreich hochgeladen.",
    "notify.upload_failed.title": "Upload fehlgeschlagen",
    "notify.upload_failed.description": "{slot} konnte nicht hochgeladen werden. Bitte versuche es erneut.",
    "notify.location_found.title": "Standort gefunden",
    "notify.location_found.description": "Dein aktueller Standort wurde ermittelt.",
    "notify.location_unsupported.title": "Standort nicht unterstützt",
    "notify.location_unsupported.description": "Dein Gerät unterstützt keine Standortdienste. Bitte gib deine Adresse manuell ein.",
    "notify.location_denied.title": "Standortzugriff verweigert",
    "notify.location_denied.description": "Bitte aktiviere die Standortdienste oder gib deine Adresse manuell ein.",
    "notify.submitted.title": "Anfrage gesendet",
    "notify.submitted.description": "Deine Anfrage {request_id} wird bearbeitet.",
    "notify.triage_complete.title": "Bewertung abgeschlossen",
    "notify.triage_complete.description": "{recommendation}",
    "notify.ambulance_dispatched.title": "Rettungswagen alarmiert",
    "notify.ambulance_dispatched.description": "Rettungseinheit {vehicle_number} ist auf dem Weg.",
    "notify.ambulance_arrived.title": "Rettungswagen eingetroffen",
    "notify.ambulance_arrived.description": "Rettungseinheit {vehicle_number} hat deinen Standort erreicht.",
    "notify.registration_submitted.title": "Registrierung gesendet",
    "notify.registration_submitted.description": "Deine Registrierung wurde zur Prüfung eingereicht. Du erhältst eine E-Mail, sobald sie geprüft wurde.",
    "notify.review_decision.title": "Prüfstatus aktualisiert",
    "notify.review_decision.description": "Dein Registrierungsstatus lautet jetzt: {status}.",
    "notify.evaluation_failed.title": "Bearbeitung fehlgeschlagen",
    "notify.evaluation_failed.description": "Deine Anfrage konnte nicht bearbeitet werden. Bitte versuche es erneut.",
}
