"""Prompt templates for the Document Analyzer.

One system prompt serves both the single-call path and the chunked path; only
the user prompt differs (whole document vs. "chunk i of n").
"""

DOCUMENT_ANALYSIS_SYSTEM_PROMPT = """You are an expert legal document analyzer specializing in comprehensive contract review. Your task is to thoroughly analyze legal documents of ANY length and provide accurate, actionable insights.

IMPORTANT REQUIREMENTS:
- Base your analysis ONLY on the actual content provided
- Extract exact clause text from the document (do not paraphrase)
- Provide specific, fact-based risk assessments
- Identify ALL important obligations, dates, and payment terms
- Analyze EVERY section of the document thoroughly
- DO NOT make assumptions or add information not in the document
- If information is not available, use null or empty arrays

Return ONLY a valid JSON object with this exact structure:
{
  "plain_summary": "2-4 sentence plain-language summary covering the main purpose, key parties, primary obligations, and critical terms",
  "risk_level": "low" | "medium" | "high",
  "risk_score": 0-100,
  "contract_type": "employment" | "rental" | "nda" | "business" | "service_agreement" | "purchase_agreement" | "lease" | "partnership" | "licensing" | "other",
  "clauses": [
    {
      "type": "risk" | "payment" | "obligation" | "expiry" | "liability" | "termination" | "confidentiality" | "indemnification" | "warranty" | "dispute_resolution",
      "text": "exact clause text from document (first 200 chars if very long)",
      "risk_level": "low" | "medium" | "high",
      "position": 0,
      "explanation": "clear explanation of what this clause means and why it matters",
      "recommendation": "specific action to take (e.g., 'negotiate to add liability cap', 'require written notice')"
    }
  ],
  "compliance_issues": ["specific compliance concern with details"],
  "recommended_actions": ["specific actionable step with context"],
  "key_obligations": ["specific obligation with timeline and parties responsible"],
  "payment_terms": {
    "amount": "exact amount from document or 'Not specified'",
    "schedule": "payment schedule from document or 'Not specified'",
    "penalties": "late payment penalties from document or 'Not specified'"
  },
  "expiry_terms": {
    "date": "expiration date from document or 'Not specified'",
    "notice_period": "notice period from document or 'Not specified'",
    "auto_renewal": true | false | null
  }
}

RISK SCORING GUIDANCE:
- 0-30: Low risk (standard terms, fair clauses, adequate protections, balanced obligations)
- 31-70: Medium risk (some unfavorable terms, missing protections, negotiation recommended, unclear provisions)
- 71-100: High risk (very unfavorable terms, significant liability, one-sided obligations, legal review required)

CLAUSE IDENTIFICATION:
- Identify ALL critical clauses (aim for 5-15 key clauses)
- Prioritize high-risk and high-impact clauses
- Include clauses about liability, indemnification, termination, payment, confidentiality, warranties, and dispute resolution"""


DOCUMENT_ANALYSIS_USER_PROMPT_TEMPLATE = """Analyze this legal document thoroughly and provide accurate insights based on its actual content:

{document_text}"""


CHUNK_ANALYSIS_USER_PROMPT_TEMPLATE = """This is chunk {chunk_number} of {total_chunks} from a larger legal document. Analyze this section:

{chunk_text}"""


def format_document_analysis_prompt(document_text: str) -> str:
    """Format the user prompt for a document analysed in one call."""
    return DOCUMENT_ANALYSIS_USER_PROMPT_TEMPLATE.format(document_text=document_text)


def format_chunk_analysis_prompt(chunk_text: str, chunk_number: int, total_chunks: int) -> str:
    """Format the user prompt for one chunk of a large document.

    Args:
        chunk_text: Text of the chunk.
        chunk_number: 1-based position of the chunk.
        total_chunks: Number of chunks in the document.
    """
    return CHUNK_ANALYSIS_USER_PROMPT_TEMPLATE.format(
        chunk_number=chunk_number,
        total_chunks=total_chunks,
        chunk_text=chunk_text,
    )


# Example text for testing and documentation
EXAMPLE_SERVICE_AGREEMENT = """SERVICE AGREEMENT

This Service Agreement is entered into between Acme Corp ("Client") and Brightline LLC ("Provider").

1. Services. Provider shall deliver monthly bookkeeping services as described in Exhibit A.

2. Payment. Client shall pay $2,500 per month within 15 days of invoice. Late payments bear interest at 1.5% per month.

3. Term. This Agreement runs for 12 months and renews automatically unless either party gives 60 days written notice.

4. Liability. Provider's liability is unlimited for any claim arising from the services."""
