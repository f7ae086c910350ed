"""
职业助手 - CV / 求职信分析与生成、职业建议与对话
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from loguru import logger

from ..exceptions import AIServiceError
from ..models import Cv
from .base import BaseTextProvider, ChatMessage

HISTORY_LIMIT = 10
CHAT_FALLBACK = "Désolé, je n'ai pas pu traiter votre demande."
NOT_PROVIDED = "Non renseigné"

CV_ANALYSIS_PROMPT = """Tu es un expert en recrutement et optimisation de CV. Analyse ce CV et fournis des conseils d'amélioration.

{context}

CV à analyser:
{content}

Analyse le CV et réponds au format JSON avec:
{{
  "score": nombre de 0 à 100,
  "suggestions": [
    {{
      "type": "structure|contenu|presentation|competences",
      "title": "Titre court de la suggestion",
      "description": "Description détaillée de l'amélioration à apporter",
      "priority": "high|medium|low"
    }}
  ],
  "strengths": ["Points forts du CV"],
  "improvements": ["Domaines d'amélioration prioritaires"]
}}"""

COVER_LETTER_ANALYSIS_PROMPT = """Tu es un expert en lettres de motivation. Analyse cette lettre et fournis des conseils d'amélioration.

{context}

Lettre de motivation à analyser:
{content}

{reference}

Analyse la lettre et réponds au format JSON avec:
{{
  "score": nombre de 0 à 100,
  "suggestions": [
    {{
      "type": "structure|personnalisation|motivation|competences",
      "title": "Titre court de la suggestion",
      "description": "Description détaillée de l'amélioration à apporter",
      "priority": "high|medium|low"
    }}
  ],
  "personalisation": nombre de 0 à 100 (niveau de personnalisation pour l'entreprise/poste),
  "relevance": nombre de 0 à 100 (pertinence par rapport au poste)
}}"""

GENERATION_PROMPT = """Tu es un expert en rédaction de lettres de motivation. Génère une lettre de motivation personnalisée et professionnelle.

Informations:
- Entreprise: {company_name}
- Poste: {position}
{sector}

CV de référence:
{cv_content}

{job_description}

Génère une lettre de motivation:
- Personnalisée pour l'entreprise et le poste
- Qui met en valeur les compétences du CV
- Structure professionnelle (en-tête, intro, développement, conclusion)
- Ton professionnel mais authentique
- Longueur appropriée (300-400 mots)

Réponds uniquement avec le contenu de la lettre, sans format JSON."""

WIZARD_SYSTEM_PROMPT = "Tu es un expert en rédaction de CV français. Tu crées des CV professionnels optimisés pour les ATS (Applicant Tracking Systems) et adaptés au marché du travail français."

WIZARD_PROMPT = """Génère un CV professionnel en français pour:

INFORMATIONS PERSONNELLES:
{personal}

OBJECTIF PROFESSIONNEL:
- Secteur: {sector}
- Poste visé: {target_position}

EXPÉRIENCES PROFESSIONNELLES:
{experiences}

FORMATION:
{education}

COMPÉTENCES:
{skills}

LANGUES:
{languages}

CERTIFICATIONS:
{certifications}

INSTRUCTIONS:
1. Crée un CV professionnel structuré et optimisé ATS
2. Adapte le contenu au secteur "{sector}" et au poste "{target_position}"
3. Optimise les descriptions d'expériences avec des verbes d'action et des résultats mesurables
4. Structure: En-tête, Résumé professionnel, Expériences, Formation, Compétences, Langues, Certifications
5. Ne pas inventer d'informations non fournies"""

LETTER_SYSTEM_PROMPT = "Tu es un expert en rédaction de lettres de motivation françaises. Tu adaptes ton style selon le secteur d'activité."

LETTER_PROMPT = """Génère une lettre de motivation professionnelle en français pour:

ENTREPRISE ET POSTE:
- Entreprise: {company_name}
- Poste: {position}
- Secteur: {sector}

INFORMATIONS PERSONNELLES:
{personal}

EXPÉRIENCE PERTINENTE:
{experiences}

MOTIVATIONS:
{motivations}

Structure: En-tête, Introduction, Corps (2-3 paragraphes), Conclusion. Longueur optimale: 250-400 mots.
Réponds uniquement avec le contenu de la lettre."""

ADVANCED_ANALYSIS_PROMPT = """Analyse ce CV français et fournis des suggestions d'amélioration détaillées:

CONTENU DU CV:
{content}

OBJECTIF PROFESSIONNEL:
- Secteur visé: {sector}
- Poste visé: {position}

Réponds au format JSON:
{{
  "score": nombre de 0 à 100,
  "strengths": ["point fort"],
  "improvements": [
    {{
      "category": "Structure|Contenu|ATS|Expérience|Cohérence",
      "issue": "description du problème",
      "suggestion": "suggestion d'amélioration précise",
      "priority": "haute|moyenne|faible"
    }}
  ],
  "ats_optimization": {{
    "missing_keywords": ["mot-clé manquant"],
    "format_issues": ["problème de format"],
    "score": nombre de 0 à 100
  }},
  "career_advice": "conseil de carrière personnalisé",
  "next_steps": ["prochaine étape"]
}}"""

CAREER_ADVICE_PROMPT = """Fournis des conseils de carrière personnalisés pour ce profil professionnel français:

PROFIL ACTUEL:
- Secteur actuel: {current_sector}
- Secteur visé: {target_sector}
- Expérience: {experience}
- Compétences: {skills}
- Objectifs: {goals}

Réponds au format JSON:
{{
  "market_insights": "analyse du marché et tendances",
  "skills_gap": ["compétence manquante"],
  "action_plan": [
    {{"action": "action à entreprendre", "timeframe": "délai", "priority": "haute|moyenne|faible", "resources": "ressources nécessaires"}}
  ],
  "certifications": ["certification recommandée"],
  "networking": "conseils de réseautage",
  "salary_insights": "insights sur les salaires",
  "next_opportunities": ["opportunité"]
}}"""

CHAT_SYSTEM_PROMPT = """Tu es un assistant IA spécialisé dans l'amélioration des CV et lettres de motivation. Tu aides les utilisateurs à optimiser leurs candidatures pour décrocher plus d'entretiens.

Contexte utilisateur:
{context}

Réponds de manière personnalisée, pratique et bienveillante. Donne des conseils concrets et actionnables."""


def clamp_score(value: Any) -> int:
    """Coerce a model-provided score into 0..100"""
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


def _lines(*pairs) -> str:
    return "\n".join(f"{label}: {value}" for label, value in pairs if value)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _or(value: Any, default: str = NOT_PROVIDED) -> str:
    return value if value else default


def _personal_block(info: Optional[Mapping[str, Any]]) -> str:
    info = info or {}
    name = " ".join(p for p in (info.get("first_name"), info.get("last_name")) if p)
    return "\n".join([
        f"- Nom: {_or(name)}",
        f"- Email: {_or(info.get('email'))}",
        f"- Téléphone: {_or(info.get('phone'))}",
        f"- Adresse: {_or(info.get('address'))}",
        f"- LinkedIn: {_or(info.get('linkedin'))}",
        f"- Résumé: {_or(info.get('summary'), 'À définir')}",
    ])


def _period(item: Mapping[str, Any], ongoing: str) -> str:
    end = ongoing if item.get("current") else _or(item.get("end_date"), "?")
    return f"{_or(item.get('start_date'), '?')} - {end}"


def _experience_block(experiences: Sequence[Mapping[str, Any]]) -> str:
    lines = []
    for exp in experiences:
        when = exp.get("duration") or _period(exp, "Actuellement")
        lines.append(f"- {exp.get('position')} chez {exp.get('company')} ({when})")
        lines.append(f"  {_or(exp.get('description'), 'Description à définir')}")
    return "\n".join(lines) or NOT_PROVIDED


def _education_block(education: Sequence[Mapping[str, Any]]) -> str:
    return "\n".join(
        f"- {edu.get('degree')} en {_or(edu.get('field'))} à {edu.get('institution')} "
        f"({_period(edu, 'En cours')})"
        for edu in education
    ) or NOT_PROVIDED


def _joined(values: Sequence[str]) -> str:
    return ", ".join(values) or NOT_PROVIDED


class CareerAssistant:
    """Prompts the text provider on behalf of the API routes

    Every public method raises ``AIServiceError`` on failure, keeping the
    provider's error code so routes can tell quota problems apart.
    """

    def __init__(self, provider: BaseTextProvider):
        self.provider = provider

    async def analyze_cv(
        self,
        content: str,
        sector: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Dict[str, Any]:
        prompt = CV_ANALYSIS_PROMPT.format(
            context=_lines(("Secteur visé", sector), ("Poste visé", position)),
            content=content,
        )
        try:
            result = await self.provider.acomplete_json([{"role": "user", "content": prompt}])
        except AIServiceError as e:
            logger.error(f"Error analyzing CV: {e}")
            raise AIServiceError("Erreur lors de l'analyse du CV", code=e.code)

        return {
            "score": clamp_score(result.get("score")),
            "suggestions": _as_list(result.get("suggestions")),
            "strengths": _as_list(result.get("strengths")),
            "improvements": _as_list(result.get("improvements")),
        }

    async def analyze_cover_letter(
        self,
        content: str,
        cv_content: Optional[str] = None,
        company_name: Optional[str] = None,
        position: Optional[str] = None,
        sector: Optional[str] = None,
    ) -> Dict[str, Any]:
        prompt = COVER_LETTER_ANALYSIS_PROMPT.format(
            context=_lines(("Entreprise", company_name), ("Poste visé", position), ("Secteur", sector)),
            content=content,
            reference=f"CV de référence:\n{cv_content}" if cv_content else "",
        )
        try:
            result = await self.provider.acomplete_json([{"role": "user", "content": prompt}])
        except AIServiceError as e:
            logger.error(f"Error analyzing cover letter: {e}")
            raise AIServiceError("Erreur lors de l'analyse de la lettre de motivation", code=e.code)

        return {
            "score": clamp_score(result.get("score")),
            "suggestions": _as_list(result.get("suggestions")),
            "personalisation": clamp_score(result.get("personalisation")),
            "relevance": clamp_score(result.get("relevance")),
        }

    async def generate_cover_letter(
        self,
        cv_content: str,
        company_name: str,
        position: str,
        job_description: Optional[str] = None,
        sector: Optional[str] = None,
    ) -> str:
        prompt = GENERATION_PROMPT.format(
            company_name=company_name,
            position=position,
            sector=f"- Secteur: {sector}" if sector else "",
            cv_content=cv_content,
            job_description=f"Description du poste:\n{job_description}" if job_description else "",
        )
        try:
            letter = await self.provider.acomplete(
                [{"role": "user", "content": prompt}], temperature=0.7, max_tokens=1500
            )
        except AIServiceError as e:
            logger.error(f"Error generating cover letter: {e}")
            raise AIServiceError("Erreur lors de la génération de la lettre de motivation", code=e.code)
        return letter.strip()

    async def generate_cv(
        self,
        personal_info: Mapping[str, Any],
        sector: str,
        target_position: str,
        experiences: Sequence[Mapping[str, Any]] = (),
        education: Sequence[Mapping[str, Any]] = (),
        skills: Sequence[str] = (),
        languages: Sequence[str] = (),
        certifications: Sequence[str] = (),
    ) -> str:
        """Write résumé prose from the CV wizard answers"""
        prompt = WIZARD_PROMPT.format(
            personal=_personal_block(personal_info),
            sector=sector,
            target_position=target_position,
            experiences=_experience_block(experiences),
            education=_education_block(education),
            skills=_joined(skills),
            languages=_joined(languages),
            certifications=_joined(certifications),
        )
        messages: List[ChatMessage] = [
            {"role": "system", "content": WIZARD_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        try:
            content = await self.provider.acomplete(messages, temperature=0.7, max_tokens=2000)
        except AIServiceError as e:
            logger.error(f"Error generating CV: {e}")
            raise AIServiceError("Erreur lors de la génération du CV", code=e.code)
        if not content or not content.strip():
            raise AIServiceError("Le CV généré est vide", code="generation_error")
        return content.strip()

    async def write_cover_letter(
        self,
        company_name: str,
        position: str,
        sector: Optional[str] = None,
        personal_info: Optional[Mapping[str, Any]] = None,
        experience: Sequence[Mapping[str, Any]] = (),
        motivations: Optional[str] = None,
    ) -> str:
        prompt = LETTER_PROMPT.format(
            company_name=company_name,
            position=position,
            sector=_or(sector, "Non spécifié"),
            personal=_personal_block(personal_info),
            experiences=_experience_block(experience),
            motivations=_or(motivations, "Fortement motivé(e) à rejoindre cette entreprise"),
        )
        messages: List[ChatMessage] = [
            {"role": "system", "content": LETTER_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        try:
            letter = await self.provider.acomplete(messages, temperature=0.7, max_tokens=1500)
        except AIServiceError as e:
            logger.error(f"Error writing cover letter: {e}")
            raise AIServiceError("Erreur lors de la génération de la lettre", code=e.code)
        if not letter or not letter.strip():
            raise AIServiceError("La lettre générée est vide", code="generation_error")
        return letter.strip()

    async def analyze_cv_advanced(
        self,
        content: str,
        sector: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Detailed review: categorized improvements, ATS keywords and next steps"""
        prompt = ADVANCED_ANALYSIS_PROMPT.format(
            content=content,
            sector=_or(sector, "Non spécifié"),
            position=_or(position, "Non spécifié"),
        )
        try:
            result = await self.provider.acomplete_json(
                [{"role": "user", "content": prompt}], temperature=0.3, max_tokens=2000
            )
        except AIServiceError as e:
            logger.error(f"Error in advanced CV analysis: {e}")
            raise AIServiceError("Erreur lors de l'analyse du CV", code=e.code)

        ats = result.get("ats_optimization")
        ats = ats if isinstance(ats, dict) else {}
        return {
            "score": clamp_score(result.get("score")),
            "strengths": _as_list(result.get("strengths")),
            "improvements": [i for i in _as_list(result.get("improvements")) if isinstance(i, dict)],
            "ats_optimization": {
                "missing_keywords": _as_list(ats.get("missing_keywords")),
                "format_issues": _as_list(ats.get("format_issues")),
                "score": clamp_score(ats.get("score")),
            },
            "career_advice": result.get("career_advice") or "",
            "next_steps": _as_list(result.get("next_steps")),
        }

    async def career_advice(
        self,
        current_sector: Optional[str] = None,
        target_sector: Optional[str] = None,
        experience: Optional[str] = None,
        skills: Sequence[str] = (),
        goals: Optional[str] = None,
    ) -> Dict[str, Any]:
        prompt = CAREER_ADVICE_PROMPT.format(
            current_sector=_or(current_sector, "Non spécifié"),
            target_sector=_or(target_sector, "Non spécifié"),
            experience=_or(experience, "Non spécifié"),
            skills=", ".join(skills) or "Non spécifié",
            goals=_or(goals, "Évolution de carrière"),
        )
        try:
            result = await self.provider.acomplete_json(
                [{"role": "user", "content": prompt}], temperature=0.7, max_tokens=2000
            )
        except AIServiceError as e:
            logger.error(f"Error generating career advice: {e}")
            raise AIServiceError("Erreur lors de la génération des conseils", code=e.code)

        return {
            "market_insights": result.get("market_insights") or "",
            "skills_gap": _as_list(result.get("skills_gap")),
            "action_plan": [a for a in _as_list(result.get("action_plan")) if isinstance(a, dict)],
            "certifications": _as_list(result.get("certifications")),
            "networking": result.get("networking") or "",
            "salary_insights": result.get("salary_insights") or "",
            "next_opportunities": _as_list(result.get("next_opportunities")),
        }

    async def chat(self, history: Sequence[ChatMessage], cvs: Sequence[Cv] = ()) -> str:
        """Answer the last user message; only the most recent messages are sent"""
        cv_lines = "\n".join(f"- {cv.title} ({cv.sector or 'secteur non spécifié'})" for cv in cvs)
        context = f"CVs disponibles:\n{cv_lines}" if cv_lines else "Aucun CV enregistré"

        messages: List[ChatMessage] = [
            {"role": "system", "content": CHAT_SYSTEM_PROMPT.format(context=context)}
        ]
        messages.extend(
            {"role": m["role"], "content": m["content"]} for m in list(history)[-HISTORY_LIMIT:]
        )
        try:
            answer = await self.provider.acomplete(messages, temperature=0.8, max_tokens=1000)
        except AIServiceError as e:
            logger.error(f"Error in AI chat: {e}")
            raise AIServiceError("Erreur lors de la conversation avec l'IA", code=e.code)
        return answer or CHAT_FALLBACK
