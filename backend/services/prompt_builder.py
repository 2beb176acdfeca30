"""Prompt template for the Gemini profile analysis call."""


def build_analysis_prompt(cv_text: str, job_description_text: str) -> str:
    """Render the CV and job description into the analysis instruction.

    Evaluation dimensions are part of the template; changing them is a text
    edit, not a code path.
    """
    return f"""You are an expert HR analyst and recruiter. Analyze the following CV against the job description and provide a comprehensive evaluation.

JOB DESCRIPTION:
---
{job_description_text}
---

CANDIDATE CV:
---
{cv_text}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "strengths": [<list of the candidate's key strengths relevant to the job>],
  "weaknesses": [<list of areas where the candidate may be lacking>],
  "alignment": {{
    "score": <integer 0-100>,
    "explanation": "<detailed explanation of how well the candidate aligns with the job requirements>"
  }},
  "recommendations": [<specific recommendations for the candidate or hiring manager>]
}}

Focus on:
1. Technical skills match
2. Experience relevance
3. Education alignment
4. Soft skills indicators
5. Career progression
6. Cultural fit indicators
7. Gaps or red flags

Provide specific examples from the CV to support your analysis. Be objective and balanced in your assessment."""
