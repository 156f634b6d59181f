import textwrap

FEEDBACK_CATEGORIES = ("ATS", "toneAndStyle", "content", "structure", "skills")

FEEDBACK_RESPONSE_FORMAT = textwrap.dedent(
    """\
    {
      "overallScore": number,            // 0-100
      "ATS": {
        "score": number,                 // 0-100, how well the resume passes applicant tracking systems
        "tips": [{"type": "good" | "improve", "tip": string}]
      },
      "toneAndStyle": {
        "score": number,
        "tips": [{"type": "good" | "improve", "tip": string, "explanation": string}]
      },
      "content": {
        "score": number,
        "tips": [{"type": "good" | "improve", "tip": string, "explanation": string}]
      },
      "structure": {
        "score": number,
        "tips": [{"type": "good" | "improve", "tip": string, "explanation": string}]
      },
      "skills": {
        "score": number,
        "tips": [{"type": "good" | "improve", "tip": string, "explanation": string}]
      }
    }"""
)


def prepare_instructions(job_title: str, job_description: str) -> str:
    return (
        "You are an expert in applicant tracking systems (ATS) and resume review.\n"
        "Analyze and rate the attached resume and explain how to improve it.\n"
        "Scores may be low when the resume is weak; be thorough and point out concrete mistakes.\n"
        "Use the job the candidate is applying for to make the feedback specific.\n"
        f"Job title: {job_title.strip()}\n"
        f"Job description:\n{job_description.strip()}\n\n"
        "Respond with a single JSON object in exactly this shape:\n"
        f"{FEEDBACK_RESPONSE_FORMAT}\n"
        "Return only the JSON object, with no surrounding text, comments or code fences."
    )
