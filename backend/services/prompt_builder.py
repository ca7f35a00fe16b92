"""All prompt templates for Gemini API calls."""

from models.schemas.matching import FuzzyMatchTitle


def _join(items: list[str], empty: str = "none") -> str:
    return ", ".join(items) if items else empty


def build_cv_parse_prompt(cv_text: str) -> str:
    """Structured extraction of job titles, education and rated skills from a CV."""
    return f"""Analyze the following CV/resume text and extract structured information.

Extract:
- "job_titles": job titles the person has held or is qualified for
- "education": educational qualifications (degrees, certifications, courses)
- "skills": every skill mentioned or implied (technical skills, soft skills, tools,
  languages, etc.), each with a proficiency rating

PROFICIENCY SCALE (integer 1-5):
- 1: Passing mention, no evidence of use
- 2: Studied or used briefly
- 3: Recent practical experience
- 4: Sustained professional use
- 5: Expert, led or taught others

Be thorough: extract every skill you can identify, including those implied by job experience.

CV text:
---
{cv_text}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "job_titles": [<strings>],
  "education": [<strings>],
  "skills": [{{"name": "<skill>", "proficiency": <integer 1-5>}}]
}}"""


def build_gap_prompt(matched: list[str], missing: list[str], job_title: str) -> str:
    """Career coaching for a seeker against one job posting."""
    return f"""You are a career coach helping a recent graduate. They want to get a job as "{job_title}".

They already have these skills: {_join(matched)}
They are missing these skills: {_join(missing)}

Provide a brief, encouraging explanation of:
1. What they're strong in
2. What skills they need to develop
3. Practical suggestions for how to acquire the missing skills (courses, projects, certifications)

Keep it concise and actionable."""


def build_candidate_summary_prompt(
    seeker_name: str,
    job_titles: list[str],
    match_score: int,
    matched: list[str],
    missing: list[str],
    job_title: str,
) -> str:
    """Recruiter-facing summary of a single candidate."""
    return f"""Summarize this candidate for a recruiter hiring for "{job_title}":

Candidate: {seeker_name}
Previous roles: {_join(job_titles)}
Match score: {match_score}%
Matching skills: {_join(matched)}
Missing skills: {_join(missing)}

Write a 2-3 sentence recruiter-friendly summary highlighting strengths and gaps."""


def build_transition_prompt(
    previous_titles: list[str],
    target_occupation: str,
    matched: list[str],
    missing: list[str],
    fuzzy_matches: list[FuzzyMatchTitle] | None = None,
    optional_matched: list[str] | None = None,
    seeker_relevance: int | None = None,
) -> str:
    """Career-change coaching that also explains near-matches and transferable skills."""
    near = "\n".join(
        f'- "{f.seeker_title}" is close to required "{f.job_title}" ({f.similarity:.0%} related)'
        for f in fuzzy_matches or []
    )
    near_section = f"\nNEAR-MATCHES (transferable skills):\n{near}\n" if near else ""

    relevance_line = ""
    if seeker_relevance is not None:
        relevance_line = f"\n{seeker_relevance}% of their current skills are relevant to the target role."

    return f"""You are a career transition coach. The person has worked as: {_join(previous_titles, "unknown")}.
They want to move into the occupation "{target_occupation}".

Essential skills they already have: {_join(matched)}
Essential skills they are missing: {_join(missing)}
Optional skills they already have: {_join(optional_matched or [])}{relevance_line}
{near_section}
Provide:
1. Which existing skills transfer, including the near-matches above
2. The most important gaps to close first
3. A realistic, step-by-step plan (courses, projects, certifications) to make the transition

Keep it encouraging, concise and actionable."""


def build_job_description_prompt(
    occupation_title: str,
    essential: list[str],
    optional: list[str],
) -> str:
    """Job posting text for an occupation and its taxonomy skills."""
    return f"""Write a concise, professional job description for the role "{occupation_title}".

Essential skills: {_join(essential[:20])}
Nice-to-have skills: {_join(optional[:15])}

Include a short role overview, key responsibilities, and the requirements split into
"Required" and "Nice to have". Use plain text with simple bullet points."""


def build_training_extraction_prompt(
    target_occupation: str,
    skills: list[str],
    search_context: str,
) -> str:
    """Turn web search results into structured training-program records."""
    skill_list = ", ".join(skills)
    return f"""You are extracting structured training program data from web search results.

The person wants to become a "{target_occupation}" and needs to learn these skills: {skill_list}.

Here are web search results for training programs:

{search_context}

From these results, extract up to 5 relevant training programs. For each, provide:
- "name": program or course name
- "institution": the school, platform, or organization offering it
- "cost": estimated cost (use "Contact for pricing" if unknown)
- "duration": estimated duration (use "Varies" if unknown)
- "url": the URL from the search result
- "relevant_skills": which of the missing skills [{skill_list}] this program addresses

Only include results that are actual training programs, courses, or educational offerings.
Skip job listings, news articles, or unrelated pages.

Respond with ONLY a valid JSON array (no markdown, no code fences) of these objects."""
