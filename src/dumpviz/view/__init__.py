"""Terminal rendering of element trees and program panels."""
