from typing import Optional


def build_prompt(content: str, slide_count: int, custom_prompt: Optional[str] = None) -> str:
    """Builds the Gemini instruction text for an executive slide deck."""
    custom_block = ""
    if custom_prompt and custom_prompt.strip():
        custom_block = f"ADDITIONAL INSTRUCTIONS FROM USER:\n{custom_prompt}\n"

    return f"""You are an expert at creating executive presentations. Your task is to analyze the following document and extract the most critical information for a {slide_count}-slide presentation targeting tech company executives.

REQUIREMENTS:
1. Create exactly {slide_count} slides (not including the title slide)
2. Each slide must have:
   - A clear, concise title (max 8 words)
   - 3-5 bullet points (max 15 words each)
3. Focus on:
   - Key decisions and recommendations
   - Quantifiable metrics, outcomes, and KPIs
   - Strategic implications and business impact
   - Action items and next steps
4. Executives have limited time - every word must earn its place
5. Lead with the most important information (inverted pyramid)
6. Use active voice and strong verbs
7. Avoid jargon unless industry-standard

{custom_block}
DOCUMENT CONTENT:
{content}

OUTPUT FORMAT:
Respond with valid JSON only. Do not wrap the response in markdown code fences (no ```json). The output is parsed directly by json.loads. Use this exact structure:
{{
  "slides": [
    {{
      "title": "Slide Title Here",
      "bullets": [
        "First key point",
        "Second key point",
        "Third key point"
      ]
    }}
  ]
}}"""
