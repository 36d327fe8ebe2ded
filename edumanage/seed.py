"""
Seed dataset.

Used only when neither the primary nor the backup slot holds usable data
(first run, or everything was lost). The fixture satisfies the data model
invariants: every enrollment references an existing student and course, and
each student's `courses` matches its Active enrollments.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from edumanage.model import default_ai_settings


_COURSES = [
    {
        "id": 1,
        "name": "Web Development Fundamentals",
        "description": (
            "Master the foundations of modern web development with hands-on projects. "
            "Learn to build responsive, interactive websites using HTML5, CSS3 and JavaScript."
        ),
        "instructorId": 1,
        "category": "Programming",
        "capacity": 30,
        "enrolled": 3,
        "startDate": "2025-01-15",
        "endDate": "2025-03-15",
        "status": "Active",
        "duration": "8 weeks",
        "level": "Beginner",
        "price": 299,
        "aiGenerated": False,
        "popularity": 85,
        "tags": ["HTML", "CSS", "JavaScript", "Responsive Design"],
    },
    {
        "id": 2,
        "name": "Advanced React Development",
        "description": (
            "Build production-ready applications using modern React patterns, hooks, "
            "context and state management."
        ),
        "instructorId": 2,
        "category": "Programming",
        "capacity": 20,
        "enrolled": 2,
        "startDate": "2025-02-01",
        "endDate": "2025-04-01",
        "status": "Active",
        "duration": "10 weeks",
        "level": "Advanced",
        "price": 449,
        "aiGenerated": True,
        "popularity": 92,
        "tags": ["React", "JavaScript", "Hooks", "State Management"],
    },
    {
        "id": 3,
        "name": "Data Science with Python",
        "description": (
            "Transform raw data into actionable insights using pandas, numpy and "
            "machine learning algorithms."
        ),
        "instructorId": 3,
        "category": "Data Science",
        "capacity": 25,
        "enrolled": 2,
        "startDate": "2025-01-20",
        "endDate": "2025-04-20",
        "status": "Active",
        "duration": "12 weeks",
        "level": "Intermediate",
        "price": 599,
        "aiGenerated": True,
        "popularity": 88,
        "tags": ["Python", "Machine Learning", "Data Analysis", "Statistics"],
    },
    {
        "id": 4,
        "name": "Digital Marketing Strategy",
        "description": (
            "Learn SEO, social media marketing, content strategy and analytics to build "
            "campaigns that drive real business results."
        ),
        "instructorId": 4,
        "category": "Marketing",
        "capacity": 35,
        "enrolled": 2,
        "startDate": "2025-01-10",
        "endDate": "2025-03-10",
        "status": "Active",
        "duration": "8 weeks",
        "level": "Beginner",
        "price": 199,
        "aiGenerated": True,
        "popularity": 76,
        "tags": ["SEO", "Social Media", "Content Strategy", "Analytics"],
    },
    {
        "id": 5,
        "name": "Mobile App Development",
        "description": (
            "Build native mobile apps for iOS and Android using React Native, from app "
            "architecture to deployment."
        ),
        "instructorId": 5,
        "category": "Programming",
        "capacity": 15,
        "enrolled": 1,
        "startDate": "2025-02-15",
        "endDate": "2025-05-15",
        "status": "Upcoming",
        "duration": "14 weeks",
        "level": "Intermediate",
        "price": 699,
        "aiGenerated": False,
        "popularity": 94,
        "tags": ["React Native", "Mobile Development", "iOS", "Android"],
    },
]

_STUDENTS = [
    {
        "id": 1,
        "name": "John Smith",
        "email": "john.smith@email.com",
        "phone": "+1-555-0101",
        "enrollmentDate": "2025-01-05",
        "status": "Active",
        "courses": [1, 3],
        "address": "123 Main St, New York, NY",
        "level": "Intermediate",
        "interests": ["Programming", "Data Science"],
        "aiRecommendations": [2, 5],
        "learningPath": ["Web Development", "Data Science", "Advanced Programming"],
    },
    {
        "id": 2,
        "name": "Emma Wilson",
        "email": "emma.wilson@email.com",
        "phone": "+1-555-0102",
        "enrollmentDate": "2025-01-08",
        "status": "Active",
        "courses": [1, 2],
        "address": "456 Oak Ave, Los Angeles, CA",
        "level": "Beginner",
        "interests": ["Programming", "Design"],
        "aiRecommendations": [4, 5],
        "learningPath": ["Web Development", "Frontend", "Full Stack"],
    },
    {
        "id": 3,
        "name": "David Brown",
        "email": "david.brown@email.com",
        "phone": "+1-555-0103",
        "enrollmentDate": "2025-01-12",
        "status": "Active",
        "courses": [3, 4],
        "address": "789 Pine St, Chicago, IL",
        "level": "Advanced",
        "interests": ["Data Science", "Marketing"],
        "aiRecommendations": [2],
        "learningPath": ["Data Science", "Analytics", "Business Intelligence"],
    },
    {
        "id": 4,
        "name": "Sophie Davis",
        "email": "sophie.davis@email.com",
        "phone": "+1-555-0104",
        "enrollmentDate": "2025-01-15",
        "status": "Active",
        "courses": [2, 4],
        "address": "321 Elm St, Houston, TX",
        "level": "Intermediate",
        "interests": ["Programming", "Marketing"],
        "aiRecommendations": [1, 3],
        "learningPath": ["Frontend Development", "Marketing Tech", "Full Stack"],
    },
    {
        "id": 5,
        "name": "Ryan Garcia",
        "email": "ryan.garcia@email.com",
        "phone": "+1-555-0105",
        "enrollmentDate": "2025-01-18",
        "status": "Active",
        "courses": [1, 5],
        "address": "654 Maple Dr, Phoenix, AZ",
        "level": "Beginner",
        "interests": ["Programming", "Mobile Development"],
        "aiRecommendations": [2],
        "learningPath": ["Web Development", "Mobile Development", "Cross-platform"],
    },
]

_INSTRUCTORS = [
    {
        "id": 1,
        "name": "Sarah Johnson",
        "email": "sarah.johnson@university.edu",
        "phone": "+1-555-1001",
        "department": "Computer Science",
        "expertise": ["HTML", "CSS", "JavaScript", "Web Design", "Frontend Development"],
        "experience": 8,
        "bio": "Web developer with 8 years of experience in frontend technologies and responsive design.",
        "courses": [1],
        "status": "Active",
        "joinDate": "2020-01-15",
        "rating": 4.8,
        "aiOptimized": False,
        "availability": ["Monday", "Wednesday", "Friday"],
    },
    {
        "id": 2,
        "name": "Michael Chen",
        "email": "michael.chen@university.edu",
        "phone": "+1-555-1002",
        "department": "Computer Science",
        "expertise": ["React", "JavaScript", "Node.js", "Frontend Development", "State Management"],
        "experience": 6,
        "bio": "React specialist building scalable web applications; contributes to open-source React projects.",
        "courses": [2],
        "status": "Active",
        "joinDate": "2021-03-10",
        "rating": 4.9,
        "aiOptimized": True,
        "availability": ["Tuesday", "Thursday", "Saturday"],
    },
    {
        "id": 3,
        "name": "Dr. Emily Rodriguez",
        "email": "emily.rodriguez@university.edu",
        "phone": "+1-555-1003",
        "department": "Data Science",
        "expertise": ["Python", "Machine Learning", "Statistics", "Data Analysis", "AI"],
        "experience": 12,
        "bio": "PhD in Data Science with 12 years of research and teaching experience.",
        "courses": [3],
        "status": "Active",
        "joinDate": "2018-08-20",
        "rating": 5.0,
        "aiOptimized": True,
        "availability": ["Monday", "Tuesday", "Wednesday"],
    },
    {
        "id": 4,
        "name": "Alex Thompson",
        "email": "alex.thompson@university.edu",
        "phone": "+1-555-1004",
        "department": "Business",
        "expertise": ["Digital Marketing", "SEO", "Social Media", "Analytics", "Content Strategy"],
        "experience": 5,
        "bio": "Digital marketing expert, certified in Google Analytics and Ads.",
        "courses": [4],
        "status": "Active",
        "joinDate": "2022-01-12",
        "rating": 4.7,
        "aiOptimized": False,
        "availability": ["Thursday", "Friday", "Saturday"],
    },
    {
        "id": 5,
        "name": "James Wilson",
        "email": "james.wilson@university.edu",
        "phone": "+1-555-1005",
        "department": "Computer Science",
        "expertise": ["React Native", "Mobile Development", "iOS", "Android", "Cross-platform"],
        "experience": 7,
        "bio": "Mobile development specialist building native and cross-platform applications.",
        "courses": [5],
        "status": "Active",
        "joinDate": "2020-11-05",
        "rating": 4.8,
        "aiOptimized": False,
        "availability": ["Monday", "Wednesday", "Friday"],
    },
]

_CATEGORIES = [
    {
        "id": 1,
        "name": "Programming",
        "description": "Software development and programming languages",
        "color": "#3B82F6",
        "popularity": 90,
        "courseCount": 3,
    },
    {
        "id": 2,
        "name": "Data Science",
        "description": "Data analysis, machine learning, and statistics",
        "color": "#10B981",
        "popularity": 85,
        "courseCount": 1,
    },
    {
        "id": 3,
        "name": "Marketing",
        "description": "Digital marketing, SEO, and business strategy",
        "color": "#F59E0B",
        "popularity": 75,
        "courseCount": 1,
    },
    {
        "id": 4,
        "name": "Design",
        "description": "UI/UX design, graphic design, and creative tools",
        "color": "#EF4444",
        "popularity": 70,
        "courseCount": 0,
    },
]


def _enrollment(student_id: int, course_id: int, date: str, ai_suggested: bool, progress: int) -> Dict[str, Any]:
    return {
        "studentId": student_id,
        "courseId": course_id,
        "enrollmentDate": date,
        "status": "Active",
        "aiSuggested": ai_suggested,
        "progress": progress,
    }


_ENROLLMENTS = [
    _enrollment(1, 1, "2025-01-05", False, 60),
    _enrollment(1, 3, "2025-01-10", True, 45),
    _enrollment(2, 1, "2025-01-08", False, 70),
    _enrollment(2, 2, "2025-01-12", True, 30),
    _enrollment(3, 3, "2025-01-12", False, 80),
    _enrollment(3, 4, "2025-01-15", False, 55),
    _enrollment(4, 2, "2025-01-15", True, 40),
    _enrollment(4, 4, "2025-01-18", False, 25),
    _enrollment(5, 1, "2025-01-18", False, 35),
    _enrollment(5, 5, "2025-01-20", True, 20),
]


def initial_data() -> Dict[str, Any]:
    """
    Return a fresh copy of the seed dataset (callers may mutate it freely).
    """
    return copy.deepcopy(
        {
            "courses": _COURSES,
            "students": _STUDENTS,
            "instructors": _INSTRUCTORS,
            "categories": _CATEGORIES,
            "enrollments": _ENROLLMENTS,
            "aiSettings": default_ai_settings(),
        }
    )
