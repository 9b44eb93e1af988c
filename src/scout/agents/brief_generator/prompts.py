"""Prompts for the design brief generator."""

SYSTEM_PROMPT = """\
You are a senior product designer and behavioral psychologist writing a \
design brief from competitive UX research.

## Role
You turn scored analyses of reference websites into a brief specific enough \
that a designer or developer could build from it directly: exact colours, \
spacing values, font pairings, and psychology-informed section order.

## Baseline comparison
Treat the analyzed sites as a named baseline. Every recommendation must cite \
which site(s) it draws from or improves on, for example "adopt linear.app's \
single-CTA hero (ctaClarity 9) but fix its low-contrast body copy". Prefer \
patterns that appear on several sites; avoid every listed anti-pattern.
"""

GENERATE_BRIEF_PROMPT = """\
Create a design brief for the following project.

Context:
- Category: {category}
- Goal: {goal}
- Sites analyzed: {siteCount}

Cover:
1. Executive vision: 2-3 sentences naming the guiding principles.
2. Psychology strategy: hook model, trust-building sequence, friction \
reduction, conversion tactics, emotional design.
3. Design direction: layout and scanning pattern, palette with hex codes \
(80/15/5 rule), font pairing and type scale, CTA hierarchy, content \
structure in scroll order, interaction patterns under 400ms.
4. Build prompts: copy-paste prompts for hero, navigation, social proof, \
features, pricing, testimonials, how-it-works, FAQ, CTA section, footer, and \
one prompt for the whole page. Each includes layout with spacing values, \
colours, typography, content guidance, the principle applied, interaction \
notes and accessibility requirements. Framework: "Use Tailwind CSS. React \
or HTML. Single file. Responsive."
5. For each analyzed site: a key takeaway and how it compares to the others.

## Output Format
Respond with a single JSON object:

{
  "executiveSummary": "",
  "targetAudience": "",
  "recommendedApproach": {
    "layout": "", "colorStrategy": "", "typographyStrategy": "",
    "ctaStrategy": "", "contentStructure": "", "interactionPatterns": ""
  },
  "psychologyStrategy": {
    "hookModel": "", "trustBuilding": "", "frictionReduction": "",
    "conversionTactics": "", "emotionalDesign": ""
  },
  "designSystem": {
    "suggestedPalette": ["#hex with label"], "suggestedFonts": ["Primary: X"],
    "spacingNotes": "", "componentList": []
  },
  "buildPrompts": {
    "heroSection": "", "navigation": "", "socialProof": "",
    "features": "", "pricing": "", "testimonials": "",
    "howItWorks": "", "faq": "", "cta": "", "footer": "", "overall": ""
  },
  "analyzedSites": [{
    "url": "", "score": 0, "keyTakeaway": "",
    "strengths": [], "weaknesses": [],
    "scoreHighlights": [{"dimension": "", "score": 0, "justification": ""}],
    "comparisonNotes": ""
  }]
}
"""


def render_brief_prompt(category: str, goal: str, site_count: int) -> str:
    return (
        GENERATE_BRIEF_PROMPT
        .replace("{category}", category)
        .replace("{goal}", goal)
        .replace("{siteCount}", str(site_count))
    )
