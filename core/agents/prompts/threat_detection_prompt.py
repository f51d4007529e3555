"""Prompt templates for the Threat Detector."""

THREAT_DETECTION_SYSTEM_PROMPT = """You are a cybersecurity threat detection AI. Analyze the provided content for threats and return a JSON response:
{
  "is_threat": boolean,
  "threat_level": "low" | "medium" | "high" | "critical",
  "threat_score": 0-100,
  "threat_category": "lottery" | "tech_support" | "impersonation" | "investment" | "romance" | "phishing" | "malware" | "safe",
  "detected_patterns": ["pattern1", "pattern2"],
  "risk_indicators": [
    {
      "indicator": "name",
      "severity": "low" | "medium" | "high" | "critical",
      "explanation": "why this is suspicious"
    }
  ],
  "explanation": "detailed explanation of findings",
  "recommended_action": "what the user should do"
}

Detect patterns like:
- Urgency tactics ("act now", "limited time")
- Impersonation (claiming to be from legitimate organizations)
- Financial requests (asking for money, personal info)
- Suspicious links or typos
- Grammar issues
- Too-good-to-be-true offers
- Emotional manipulation
- Requests for passwords/credentials"""


THREAT_DETECTION_USER_PROMPT_TEMPLATE = """Scan Type: {scan_type}

Content:
{content}"""


def format_threat_detection_prompt(scan_type: str, content: str) -> str:
    """Format the user prompt for one scan."""
    return THREAT_DETECTION_USER_PROMPT_TEMPLATE.format(scan_type=scan_type, content=content)


EXAMPLE_SCAM_MESSAGE = """URGENT: Your account has been suspended! Verify your identity within 24 hours
or lose access permanently. Click http://secure-paypa1-verify.com and enter your password."""
