"""
Rule-based health insight generator.

Seven independent analyzer passes inspect the same metrics snapshot and
weekly steps series. Their outputs are concatenated, stably sorted by
priority (high first) and capped. Themes are not deduplicated across passes:
e.g. short sleep is reported by both the sleep pass and the critical pass.
"""

import math
from collections.abc import Callable, Mapping
from datetime import date

from preventa.config import get_settings
from preventa.schemas.health import OZ_PER_GLASS, HealthMetrics
from preventa.schemas.insights import Insight, InsightKind, InsightPriority
from preventa.services.progress import health_score

HIGH = InsightPriority.HIGH
MEDIUM = InsightPriority.MEDIUM
LOW = InsightPriority.LOW

TREND_WINDOW_DAYS = 3
TREND_UP_RATIO = 1.15
TREND_DOWN_RATIO = 0.85

WeeklySteps = Mapping[date, int]
Analyzer = Callable[[HealthMetrics, WeeklySteps], list[Insight]]


def _insight(kind: InsightKind, title: str, message: str, priority: InsightPriority) -> Insight:
    return Insight(kind=kind, title=title, message=message, priority=priority)


def analyze_steps(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    insights = []

    if metrics.steps > 0:
        progress = metrics.steps_progress
        if progress >= 1.0:
            insights.append(_insight(
                InsightKind.ACHIEVEMENT,
                "Steps Goal Achieved!",
                f"You've reached your daily step goal of {metrics.steps_goal} steps. "
                "Great job staying active!",
                HIGH,
            ))
        elif progress >= 0.8:
            insights.append(_insight(
                InsightKind.RECOMMENDATION,
                "Almost There!",
                f"You're at {int(progress * 100)}% of your step goal. Just "
                f"{metrics.steps_goal - metrics.steps} more steps to reach it!",
                MEDIUM,
            ))
        elif progress < 0.5:
            insights.append(_insight(
                InsightKind.RECOMMENDATION,
                "Boost Your Activity",
                f"You've taken {metrics.steps} steps today. Try a short walk to "
                "increase your activity level.",
                MEDIUM,
            ))

    trend = _weekly_trend(weekly_steps)
    if trend is not None:
        insights.append(trend)

    return insights


def _weekly_trend(weekly_steps: WeeklySteps) -> Insight | None:
    """Compare the mean of the latest three days with the earliest three."""
    if len(weekly_steps) < TREND_WINDOW_DAYS:
        return None

    ordered = [weekly_steps[day] for day in sorted(weekly_steps)]
    recent_avg = sum(ordered[-TREND_WINDOW_DAYS:]) / TREND_WINDOW_DAYS
    earlier_avg = sum(ordered[:TREND_WINDOW_DAYS]) / TREND_WINDOW_DAYS

    if recent_avg > earlier_avg * TREND_UP_RATIO:
        if earlier_avg > 0:
            change = f"by {int((recent_avg / earlier_avg - 1.0) * 100)}% "
        else:
            change = ""
        return _insight(
            InsightKind.TREND,
            "Activity Trend: Upward",
            f"Your average daily steps have increased {change}this week. Keep it up!",
            HIGH,
        )
    if recent_avg < earlier_avg * TREND_DOWN_RATIO:
        return _insight(
            InsightKind.WARNING,
            "Activity Decreasing",
            "Your step count has decreased recently. Consider adding a daily walk "
            "to maintain your activity level.",
            MEDIUM,
        )
    return None


def analyze_sleep(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    hours = metrics.sleep_hours
    if hours <= 0:
        return []

    if 7 <= hours <= 9:
        return [_insight(
            InsightKind.ACHIEVEMENT,
            "Great Sleep Last Night",
            f"You got {hours:.1f} hours of sleep. This is within the recommended "
            "7-9 hour range for adults.",
            HIGH,
        )]
    if hours < 6:
        return [_insight(
            InsightKind.WARNING,
            "Insufficient Sleep",
            f"You got only {hours:.1f} hours of sleep. Aim for 7-9 hours for optimal health.",
            HIGH,
        )]
    if hours > 10:
        return [_insight(
            InsightKind.RECOMMENDATION,
            "Excessive Sleep",
            f"You slept {hours:.1f} hours. While rest is important, too much sleep "
            "may indicate underlying issues.",
            MEDIUM,
        )]
    return []


def analyze_heart_rate(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    bpm = metrics.heart_rate_bpm
    if bpm <= 0:
        return []

    if bpm < 60:
        return [_insight(
            InsightKind.RECOMMENDATION,
            "Low Resting Heart Rate",
            f"Your resting heart rate is {bpm} bpm. This is low and may indicate "
            "good cardiovascular fitness.",
            LOW,
        )]
    if bpm > 100:
        return [_insight(
            InsightKind.WARNING,
            "Elevated Heart Rate",
            f"Your heart rate is {bpm} bpm. If this persists at rest, consider "
            "consulting a healthcare provider.",
            HIGH,
        )]
    return [_insight(
        InsightKind.ACHIEVEMENT,
        "Healthy Heart Rate",
        f"Your resting heart rate of {bpm} bpm is within the normal range (60-100 bpm).",
        LOW,
    )]


def analyze_activity(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    calories = metrics.active_calories
    if calories <= 0:
        return []

    if calories >= 600:
        return [_insight(
            InsightKind.ACHIEVEMENT,
            "Active Day!",
            f"You've burned {calories} active calories today. Your body is getting "
            "great movement!",
            MEDIUM,
        )]
    if calories < 300:
        return [_insight(
            InsightKind.RECOMMENDATION,
            "Increase Movement",
            "Try to increase your daily activity. Even a 10-minute walk can help "
            "boost your active calorie burn.",
            MEDIUM,
        )]
    return []


def analyze_hydration(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    if metrics.water_oz <= 0:
        return []

    progress = metrics.water_progress
    if progress >= 1.0:
        return [_insight(
            InsightKind.ACHIEVEMENT,
            "Hydration Goal Met!",
            f"You've consumed {metrics.water_oz:.1f} oz of water today. Excellent hydration!",
            MEDIUM,
        )]
    if progress < 0.5:
        return [_insight(
            InsightKind.RECOMMENDATION,
            "Stay Hydrated",
            f"You're at {int(progress * 100)}% of your hydration goal. Try drinking "
            "more water throughout the day.",
            MEDIUM,
        )]
    return []


def analyze_correlations(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    insights = []

    if 7 <= metrics.sleep_hours <= 9 and metrics.steps >= metrics.steps_goal * 0.8:
        insights.append(_insight(
            InsightKind.ACHIEVEMENT,
            "Great Balance!",
            "You're maintaining a healthy balance of sleep and activity. This "
            "combination supports overall wellness.",
            HIGH,
        ))

    if metrics.active_calories >= 500 and metrics.dietary_calories > 0:
        ratio = metrics.active_calories / metrics.dietary_calories
        if ratio > 0.3:
            insights.append(_insight(
                InsightKind.TREND,
                "Active Lifestyle",
                "Your activity level is well-matched with your calorie intake. Keep "
                "maintaining this balance!",
                MEDIUM,
            ))

    return insights


def analyze_critical(metrics: HealthMetrics, weekly_steps: WeeklySteps) -> list[Insight]:
    """High-priority recommendations driven by the overall health score."""
    insights = []
    score = health_score(metrics) * 100

    if score < 50:
        insights.append(_insight(
            InsightKind.WARNING,
            "Health Score Needs Attention",
            f"Your health score is {int(score)}/100. Focus on small wins today: a walk, "
            "a glass of water and an earlier bedtime.",
            HIGH,
        ))
    elif score < 70:
        insights.append(_insight(
            InsightKind.RECOMMENDATION,
            "Room to Improve",
            f"Your health score is {int(score)}/100. A little more movement and "
            "hydration will push you into a healthy range.",
            HIGH,
        ))
    elif score >= 80:
        insights.append(_insight(
            InsightKind.ACHIEVEMENT,
            "Excellent Health Score",
            f"Your health score is {int(score)}/100. You're hitting your daily goals "
            "consistently.",
            HIGH,
        ))

    if metrics.steps_progress < 0.5 and metrics.exercise_progress < 0.5:
        insights.append(_insight(
            InsightKind.RECOMMENDATION,
            "Get Moving Today",
            "Both your steps and exercise are below half of today's goal. A brisk "
            "20-minute walk would improve both.",
            HIGH,
        ))

    if metrics.sleep_hours < 6:
        insights.append(_insight(
            InsightKind.WARNING,
            "Prioritize Sleep",
            f"You slept {metrics.sleep_hours:.1f} hours. Less than 6 hours affects "
            "focus, mood and recovery; aim for a consistent bedtime tonight.",
            HIGH,
        ))

    if metrics.water_progress < 0.5:
        glasses = math.ceil((metrics.water_goal_oz - metrics.water_oz) / OZ_PER_GLASS)
        insights.append(_insight(
            InsightKind.RECOMMENDATION,
            "Drink More Water",
            f"Drink {glasses} more {OZ_PER_GLASS}oz glasses of water to reach your "
            "hydration goal.",
            HIGH,
        ))

    if metrics.active_calories < 300 and metrics.dietary_calories > 1500:
        insights.append(_insight(
            InsightKind.RECOMMENDATION,
            "Balance Intake and Activity",
            f"You've eaten {metrics.dietary_calories} kcal but burned only "
            f"{metrics.active_calories} active kcal. Add some activity to balance your day.",
            HIGH,
        ))

    return insights


ANALYZERS: tuple[Analyzer, ...] = (
    analyze_steps,
    analyze_sleep,
    analyze_heart_rate,
    analyze_activity,
    analyze_hydration,
    analyze_correlations,
    analyze_critical,
)


def generate_insights(
    metrics: HealthMetrics,
    weekly_steps: WeeklySteps | None = None,
    limit: int | None = None,
) -> list[Insight]:
    """Run every analyzer and return the top insights by priority."""
    if weekly_steps is None:
        weekly_steps = metrics.weekly_steps
    if limit is None:
        limit = get_settings().max_insights

    insights: list[Insight] = []
    for analyzer in ANALYZERS:
        insights.extend(analyzer(metrics, weekly_steps))

    # sorted() is stable, so equal priorities keep emission order
    insights = sorted(insights, key=lambda insight: insight.priority.rank, reverse=True)
    return insights[:limit]
