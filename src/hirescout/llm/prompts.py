from __future__ import annotations

KEYWORD_EXTRACTION_PROMPT = """
Extract key information from the following job description.
Return ONLY a valid JSON object (no markdown, no code blocks) with keys:
- role: string (job title or role name)
- skills: string[]
- min_experience_years: number
- location: string (city or location name)

Job Title: {job_title}
Job Description:
{job_text}
""".strip()

CANDIDATE_ANALYSIS_PROMPT = """
Analyze this candidate's fit for the job.
Return ONLY a valid JSON object with keys:
- fitScore: number (0..100)
- summary: string (brief summary of candidate fit)
- recommendation: one of [reach_out, wait, archive, advance, offer, reject]
- confidence: number (0..100)

Job: {job_title} at {company_name}
Job Description: {job_text}
Required Skills: {required_skills}
Experience Required: {min_experience_years} years

Candidate: {full_name}
Headline: {headline}
Skills Match Score: {score}
Breakdown: {breakdown_json}
""".strip()

FIRST_MESSAGE_PROMPT = """
Draft a first outreach message to a candidate.
Tone: enthusiastic and authentic, no corporate jargon. Keep it to 100-150 words.
Structure: a personalised opening, why they fit (emphasise growth in the role),
and a clear low-pressure call to action.
Return only the message text, with no greeting line or signature.

Job Title: {job_title}
Company: {company_name}
Description: {job_summary}
Required Skills: {required_skills}
Experience Required: {min_experience_years} years

Candidate: {full_name}
Headline: {headline}
Match Score: {score}/100
{ai_summary_line}
Why they fit:
{top_reasons}
""".strip()

CONVERSATION_SUMMARY_PROMPT = """
Summarize this recruiting conversation in 2-3 sentences. Return only the summary.

{conversation}
""".strip()

REPLY_SUGGESTION_PROMPT = """
Based on this last message from the candidate, suggest an appropriate response (under 100 words).
Return only the suggested message.

Candidate: {last_message}
""".strip()

OFFER_LETTER_PROMPT = """
Draft a professional offer letter for this candidate. Return only the offer letter text.

Job: {job_title} at {company_name}
Candidate: {full_name}
Salary: {salary}
Start Date: {start_date}
""".strip()

NEGOTIATION_PROMPT = """
The candidate has requested: "{request}"

Suggest an appropriate negotiation response (under 150 words). Return only the response.
""".strip()

DECISION_SUMMARY_PROMPT = """
Generate a brief decision summary for {decision_verb} this candidate.
Return only the summary (2-3 sentences).

Job: {job_title}
Candidate: {full_name}
Score: {score}
Decision: {decision}
""".strip()
